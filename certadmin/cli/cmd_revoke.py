import typing

from .cli import cli
from . import common
from ..interface import Verb


@cli.command()
@common.hosts_argument
@common.all_option
def revoke(hosts: typing.Tuple[str, ...], all_hosts: bool):
    """
    Add certificates to the certificate revocation list.
    """
    common.run_interface(Verb.REVOKE, common.select_hosts(hosts, all_hosts))
