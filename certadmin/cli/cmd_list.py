import typing

import click

from .cli import cli
from . import common
from ..interface import Verb


@cli.command(name="list")
@common.hosts_argument
@common.all_option
@click.option(
    "--signed", "signed_hosts",
    help="List signed certificates only.",
    is_flag=True,
    default=False
)
def list_certificates(
    hosts: typing.Tuple[str, ...],
    all_hosts: bool,
    signed_hosts: bool
):
    """
    List certificate requests, or certificates with --all or --signed.

    Requests are listed with a blank mark, signed certificates with "+" and
    certificates that fail verification with "-".
    """
    common.run_interface(
        Verb.LIST,
        common.select_hosts(hosts, all_hosts, signed_hosts)
    )
