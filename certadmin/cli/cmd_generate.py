import typing

import click

from .cli import cli
from . import common
from ..interface import Verb


def split_names(ctx, param, value: typing.Optional[str]) -> typing.List[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


@cli.command()
@common.hosts_argument
@common.all_option
@click.option(
    "--dns-alt-names",
    help="Comma separated DNS names to add as subject alternative names.",
    callback=split_names
)
def generate(
    hosts: typing.Tuple[str, ...],
    all_hosts: bool,
    dns_alt_names: typing.List[str]
):
    """
    Generate a key and a signed certificate for each host.
    """
    common.run_interface(
        Verb.GENERATE,
        common.select_hosts(hosts, all_hosts),
        {"dns_alt_names": dns_alt_names}
    )
