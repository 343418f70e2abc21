"""
Cloud-Search CLI - AWS Compliance Scanner

Main entry point for the command-line interface.
"""

import sys
from typing import Optional, Type

import click
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.markup import escape

from . import __version__
from .core.aws_client import AWSClient
from .core.base_rule import BaseRule
from .core.exceptions import CloudSearchError
from .core.key_trust import TRUST_CLASS_ALIASES
from .core.logging import setup_logging
from .core.region_resolver import ALL_REGIONS, PARTITION_HOME_REGIONS, RegionResolver
from .core.scan_driver import VERBOSITIES, DriverState, ScanDriver
from .reporters import FORMATS
from .rules import REGISTRY


console = Console()
error_console = Console(stderr=True)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

AWS_EPILOG = """\b
Regions:
  When scanning a single resource (-i), give the region it lives in.
  For global services such as S3, use any valid region.

\b
Encryption:
  Keys come in two flavors: provider (AWS managed) and customer managed.
  Scans asking for customer keys report resources encrypted with
  provider keys as WARNING instead of FAIL.
"""


def _fail(message: str, code: int = 1) -> None:
    error_console.print(f"\n[red bold]Error:[/red bold] {escape(message)}")
    sys.exit(code)


@click.group()
@click.version_option(version=__version__, prog_name="cloud-search")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for diagnostics on stderr",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Also write logs to this file",
)
def cli(log_level: str, log_file: Optional[str]):
    """
    Cloud-Search: cloud compliance scanner

    Runs one compliance rule against the resources of an AWS account and
    reports one OK / WARNING / FAIL / UNKNOWN verdict per resource.
    """
    setup_logging(level=log_level, log_file=log_file, console=error_console)


@cli.group(epilog=AWS_EPILOG)
@click.option(
    "--region",
    "-r",
    default=ALL_REGIONS,
    show_default=True,
    help="AWS region name, or 'all' for every enabled region",
)
@click.option(
    "--profile",
    "-p",
    default=None,
    help="AWS profile name from ~/.aws/credentials",
)
@click.option(
    "--resourceId",
    "-i",
    "resource_id",
    default=None,
    help="Audit only this resource (requires --region)",
)
@click.option(
    "--domain",
    type=click.Choice(sorted(PARTITION_HOME_REGIONS)),
    default="pub",
    show_default=True,
    help="AWS partition: pub (commercial) or gov (GovCloud)",
)
@click.option(
    "--verbosity",
    type=click.Choice(VERBOSITIES),
    default="normal",
    show_default=True,
    help="silent prints nothing",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(FORMATS),
    default="terminal",
    show_default=True,
    help="Output format",
)
@click.option(
    "--output",
    "-o",
    default=None,
    help="Write JSON output to this file instead of stdout",
)
@click.pass_context
def aws(
    ctx: click.Context,
    region: str,
    profile: Optional[str],
    resource_id: Optional[str],
    domain: str,
    verbosity: str,
    output_format: str,
    output: Optional[str],
):
    """AWS cloud provider."""
    ctx.obj = {
        "region": region,
        "profile": profile,
        "resource_id": resource_id,
        "partition": domain,
        "verbosity": verbosity,
        "output_format": output_format,
        "output": output,
    }


def run_rule(options: dict, rule_class: Type[BaseRule], key_type: Optional[str] = None):
    """Run one rule with the options of the ``aws`` group and render the audits."""
    driver = None
    try:
        driver = ScanDriver(
            rule_class,
            region=options["region"],
            profile=options["profile"],
            resource_id=options["resource_id"],
            key_type=key_type,
            partition=options["partition"],
            verbosity=options["verbosity"],
        )
        driver.start()
        driver.output(options["output_format"], output_path=options["output"])

    except KeyboardInterrupt:
        error_console.print("\n[yellow]Scan cancelled by user.[/yellow]")
        sys.exit(130)
    except Exception as e:
        # The spinner has already printed the scan failure
        if (
            driver is not None
            and driver.state is DriverState.FAILED
            and driver.verbosity != "silent"
        ):
            sys.exit(1)
        _fail(str(e))


def _rule_command(rule_class: Type[BaseRule]) -> click.Command:
    """Build the click command for one rule."""

    @click.command(rule_class.rule, help=f"\b\n{rule_class.description}")
    @click.pass_obj
    def command(options: dict, key_type: Optional[str] = None):
        run_rule(options, rule_class, key_type=key_type)

    if rule_class.needs_key_type:
        command = click.option(
            "--keyType",
            "-t",
            "key_type",
            type=click.Choice(sorted(TRUST_CLASS_ALIASES), case_sensitive=False),
            default="provider",
            show_default=True,
            help="Key type the resource must be encrypted with",
        )(command)
    return command


def _service_group(ctx_group: click.Group, name: str) -> click.Group:
    """Return the subgroup ``name`` of ``ctx_group``, creating it on first use."""
    existing = ctx_group.commands.get(name)
    if isinstance(existing, click.Group):
        return existing
    group = click.Group(name, help=f"{name} rules")
    ctx_group.add_command(group)
    return group


def _register_rules(group: click.Group) -> None:
    """Add one nested subgroup per service path, one command per rule."""
    for service_path, rules in REGISTRY.items():
        parent = group
        for part in service_path:
            parent = _service_group(parent, part)
        for rule_class in rules.values():
            parent.add_command(_rule_command(rule_class))


_register_rules(aws)


@cli.command("regions")
@click.option(
    "--profile",
    "-p",
    default=None,
    help="AWS profile name from ~/.aws/credentials",
)
@click.option(
    "--domain",
    type=click.Choice(sorted(PARTITION_HOME_REGIONS)),
    default="pub",
    show_default=True,
    help="AWS partition",
)
def list_regions(profile: Optional[str], domain: str):
    """List the regions a scan with --region all would visit."""
    try:
        resolver = RegionResolver(AWSClient(profile=profile), partition=domain)
        regions = resolver.discover_regions()

        console.print(f"\n[bold]Available AWS Regions ({len(regions)} total):[/bold]\n")
        for region in regions:
            console.print(f"  • {region}")
        console.print()

    except (CloudSearchError, ClientError, BotoCoreError) as e:
        _fail(str(e))


@cli.command("validate")
@click.option(
    "--profile",
    "-p",
    default=None,
    help="AWS profile name from ~/.aws/credentials",
)
@click.option(
    "--region",
    "-r",
    default="us-east-1",
    show_default=True,
    help="AWS region to use for validation",
)
def validate_credentials(profile: Optional[str], region: str):
    """Validate AWS credentials and show account info."""
    try:
        identity = AWSClient(profile=profile).get_caller_identity(region=region)

        console.print("\n[green bold]AWS credentials are valid![/green bold]")
        console.print(f"\n  Account ID: {identity.get('Account')}")
        console.print(f"  Identity: {escape(str(identity.get('Arn')))}")
        console.print(f"  Region: {region}")
        if profile:
            console.print(f"  Profile: {profile}")
        console.print()

    except CloudSearchError as e:
        error_console.print(f"\n[red bold]Validation Failed:[/red bold] {escape(str(e))}")
        sys.exit(1)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
