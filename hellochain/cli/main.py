import logging
import sys
from functools import partial
from typing import Optional

import click

from hellochain import __version__ as about
from hellochain.application import workflows
from hellochain.application.sequencer import StageListener, run_sequence
from hellochain.chain.init import ProgramClient
from hellochain.cli.config import setup_logging
from hellochain.cli.exit_codes import STEP_FAILURE, SUCCESS
from hellochain.cli.presenter import CliPresenter
from hellochain.cli.prompts import console_number, fixed_number
from hellochain.cli.validators import validate_card_data, validate_stage_names
from hellochain.config import load_cluster_settings
from hellochain.domain.requests import RunRequest, Variant

# Get a logger for this module.
log = logging.getLogger(__name__)

STAGE_LIST = ", ".join(workflows.ALL_STAGE_NAMES)

EPILOG = f"""
Examples:

{click.style('• store a number with the hello program on a local cluster', fg="green")}

    $ hellochain hello

{click.style('• run the mech program on devnet with an explicit program id', fg="green")}

    $ hellochain mech --rpc-url devnet --program-id <program id>

{click.style('• store 42 without prompting and print the stored number afterwards', fg="green")}

    $ hellochain hello --number 42 --enable report_greetings
"""


def run_options(func):
    """Attach the options shared by every run command."""
    options = [
        click.option(
            "--rpc-url", "-u",
            metavar="<url|moniker>",
            help="Cluster endpoint or one of localhost, devnet, testnet, mainnet-beta",
            envvar="HELLOCHAIN_RPC_URL",
        ),
        click.option(
            "--payer-keypair", "-k",
            type=click.Path(dir_okay=False),
            metavar="<file>",
            help="Fee payer keypair file (JSON byte array)",
        ),
        click.option(
            "--program-id", "-p",
            metavar="<pubkey>",
            help="Deployed program id; overrides --program-keypair",
        ),
        click.option(
            "--program-keypair",
            type=click.Path(dir_okay=False),
            metavar="<file>",
            help="Program keypair file produced by the program build",
        ),
        click.option(
            "--seed",
            metavar="<text>",
            help="Seed used to derive the counter account",
        ),
        click.option(
            "--config", "config_file",
            type=click.Path(dir_okay=False),
            metavar="<file>",
            help="TOML config file with a [cluster] table",
        ),
        click.option(
            "--number", "-n",
            metavar="<text>",
            help="Answer number prompts with this value instead of asking",
        ),
        click.option(
            "--enable", "-E",
            multiple=True,
            metavar="<stage>",
            callback=validate_stage_names,
            help=f"Enable a stage that is off by default ({STAGE_LIST})",
        ),
        click.option(
            "--disable", "-D",
            multiple=True,
            metavar="<stage>",
            callback=validate_stage_names,
            help="Disable a stage that is on by default",
        ),
        click.option(
            "--card-data",
            metavar="<hex>",
            callback=validate_card_data,
            help="Hex payload for the create_card stage",
        ),
        click.option(
            "--verbose", "-v",
            is_flag=True,
            default=False,
            help="Enable debug logging",
        ),
        click.option(
            "--quiet",
            is_flag=True,
            default=False,
            help="Only print errors",
        ),
        click.option(
            "--json", "json_output",
            is_flag=True,
            default=False,
            help="Print the run outcome as one JSON object",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _log_level(verbose: bool, quiet: bool, json_output: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet or json_output:
        return logging.WARNING
    return logging.INFO


def run_variant(
        ctx: click.Context,
        variant: Variant,
        *,
        rpc_url: Optional[str],
        payer_keypair: Optional[str],
        program_id: Optional[str],
        program_keypair: Optional[str],
        seed: Optional[str],
        config_file: Optional[str],
        number: Optional[str],
        enable: frozenset,
        disable: frozenset,
        card_data: bytes,
        verbose: bool,
        quiet: bool,
        json_output: bool,
):
    """
    Build and run the stages of ``variant``, then exit with the outcome's code.

    Stage toggles and configuration problems are usage errors (exit 2). Once the
    stages start, the first failure is reported on stderr and the process exits -1.
    """
    setup_logging(
        level=_log_level(verbose, quiet, json_output),
        stream=sys.stderr if json_output else None,
    )
    presenter = CliPresenter(json_output=json_output, quiet=quiet)

    request = RunRequest(variant=variant, enable=enable, disable=disable, card_data=card_data)
    toggle_error = workflows.verify_stage_toggles(request)
    if toggle_error:
        raise click.UsageError(toggle_error, ctx=ctx)

    try:
        settings = load_cluster_settings(
            config_file=config_file,
            overrides={
                "rpc_url": rpc_url,
                "payer_keypair": payer_keypair,
                "program_id": program_id,
                "program_keypair": program_keypair,
                "seed": seed,
            },
        )
    except ValueError as exc:
        raise click.UsageError(f"Invalid configuration: {exc}", ctx=ctx)

    if number is not None:
        ask_number = fixed_number(number)
    else:
        ask_number = partial(console_number, err=json_output)

    client = ProgramClient(settings)
    stages = workflows.build_stages(request, client=client, ask_number=ask_number)

    presenter.emit_intro(workflows.INTRO)
    log.debug("Running %s against %s", variant, settings.rpc_url)
    outcome = run_sequence(stages, listener=StageListener(on_message=presenter.emit_notice))
    if not outcome.ok:
        log.debug("Run aborted at %s", outcome.failed_stage, exc_info=outcome.error)

    presenter.emit_outcome(outcome, variant=variant)
    ctx.exit(SUCCESS if outcome.ok else STEP_FAILURE)


version_option = click.version_option(
    about.__version__,
    prog_name=about.__title__,
    message="%(prog)s, version %(version)s\nCheck {url} for more info".format(url=about.__url__),
)


@click.group(
    help=about.__description__,
    epilog=EPILOG,
)
@version_option
def main():
    """Entry point grouping the hello and mech run commands."""


# The commands carry --version too, as they are also installed as standalone scripts.
@main.command(help="Store a number with the hello program.")
@run_options
@version_option
@click.pass_context
def hello(ctx: click.Context, **options):
    run_variant(ctx, "hello", **options)


@main.command(help="Execute an impact with the mech program.")
@run_options
@version_option
@click.pass_context
def mech(ctx: click.Context, **options):
    run_variant(ctx, "mech", **options)


if __name__ == "__main__":
    main(prog_name=about.__title__)
