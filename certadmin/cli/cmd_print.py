import typing

from .cli import cli
from . import common
from ..interface import Verb


@cli.command(name="print")
@common.hosts_argument
@common.all_option
def print_certificates(hosts: typing.Tuple[str, ...], all_hosts: bool):
    """
    Print the details of signed certificates.
    """
    common.run_interface(Verb.PRINT, common.select_hosts(hosts, all_hosts))
