import typing

from .cli import cli
from . import common
from ..interface import Verb


@cli.command()
@common.hosts_argument
@common.all_option
def verify(hosts: typing.Tuple[str, ...], all_hosts: bool):
    """
    Verify certificates against the CA certificate and revocation list.
    """
    common.run_interface(Verb.VERIFY, common.select_hosts(hosts, all_hosts))
