import logging
import typing

import click

from .cli import cli
from . import common
from ..interface import Verb

logger = logging.getLogger(__name__)


@cli.command()
@common.hosts_argument
@common.all_option
@click.option(
    "--allow-dns-alt-names",
    help="Sign requests that carry DNS subject alternative names.",
    is_flag=True,
    default=False
)
def sign(
    hosts: typing.Tuple[str, ...],
    all_hosts: bool,
    allow_dns_alt_names: bool
):
    """
    Sign pending certificate requests.

    Use --all to sign every waiting request.
    """
    if allow_dns_alt_names:
        logger.warning("Requests with DNS alternative names will be signed")
    common.run_interface(
        Verb.SIGN,
        common.select_hosts(hosts, all_hosts),
        {"allow_dns_alt_names": allow_dns_alt_names}
    )
