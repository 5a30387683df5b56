import dataclasses
import logging
import typing

import click

from ..authority import LocalCertificateAuthority
from ..exceptions import InterfaceError
from ..interface import Interface, Selection, Verb


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Settings:
    ssldir: str
    trace: bool = False


hosts_argument = click.argument("hosts", nargs=-1)

all_option = click.option(
    "-a", "--all", "all_hosts",
    help="Operate on all known hosts instead of the listed ones.",
    is_flag=True,
    default=False
)


def select_hosts(
    hosts: typing.Tuple[str, ...],
    all_hosts: bool = False,
    signed_hosts: bool = False
):
    if all_hosts:
        return Selection.ALL
    if signed_hosts:
        return Selection.SIGNED
    return list(hosts)


def run_interface(
    verb: Verb,
    to,
    options: typing.Optional[typing.Dict[str, typing.Any]] = None
) -> None:
    """
        Build an Interface for verb and apply it to the local CA.

        Fatal input errors end the command with exit status 1.
    """
    ctx = click.get_current_context()
    settings: Settings = ctx.find_object(Settings)
    options = dict(options or {})
    options["to"] = to
    try:
        interface = Interface(verb, options, trace=settings.trace)
        interface.apply(LocalCertificateAuthority(settings.ssldir))
    except (ValueError, InterfaceError) as e:
        logger.critical("%s", e)
        ctx.exit(1)
