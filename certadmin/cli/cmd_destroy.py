import typing

from .cli import cli
from . import common
from ..interface import Verb


@cli.command()
@common.hosts_argument
@common.all_option
def destroy(hosts: typing.Tuple[str, ...], all_hosts: bool):
    """
    Delete certificates, requests and private keys of hosts.
    """
    common.run_interface(Verb.DESTROY, common.select_hosts(hosts, all_hosts))
