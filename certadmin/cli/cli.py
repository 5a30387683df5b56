import logging

import click

from .common import Settings


@click.group(context_settings={"auto_envvar_prefix": "CERTADMIN"})
@click.option(
    "--ssldir",
    help="The directory holding the certificate authority and host "
    "certificates.",
    default="~/.certadmin",
    show_default=True,
    show_envvar=True
)
@click.option(
    "--trace",
    help="Print a traceback when a command fails.",
    is_flag=True,
    default=False,
    show_envvar=True
)
@click.option(
    "--debug",
    help="Enable debug logging.",
    is_flag=True,
    default=False,
    show_envvar=True
)
@click.pass_context
def cli(ctx: click.Context, ssldir: str, trace: bool, debug: bool):
    """
    Manage the certificates of a local certificate authority.
    """
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.obj = Settings(ssldir=ssldir, trace=trace)
