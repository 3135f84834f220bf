"""authprofile CLI.

Lists available profiles and checks the host configuration against the
active profile.
"""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from authprofile_library.config.loader import load_config
from authprofile_library.config.settings import AuthProfileSettings
from authprofile_library.models.verification import VerificationState
from authprofile_library.services.active_profile import ActiveProfileLoader
from authprofile_library.services.active_profile import ProfileLoadError
from authprofile_library.services.profile_catalog import ProfileCatalogService
from authprofile_library.services.verifier import ConfigurationVerifier

EXIT_INVALID = 1
EXIT_NOT_CONFIGURED = 2
EXIT_ERROR = 3


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def fail(message: str) -> None:
    """Print a fatal error and exit."""
    click.echo(f"Error: {message}", err=True)
    sys.exit(EXIT_ERROR)


def echo_diagnostics(diagnostics: list[str]) -> None:
    for diagnostic in diagnostics:
        click.echo(f"  - {diagnostic}")


@click.group()
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Settings file to use")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, debug: bool):
    """Inspect the host's authentication profile."""
    try:
        settings = load_config(config_path)
    except ValidationError as e:
        fail(f"Invalid configuration: {e}")
    configure_logging("debug" if debug else settings.log_level)
    ctx.obj = settings


@cli.command("list")
@click.pass_obj
def list_profiles(settings: AuthProfileSettings):
    """List available profiles."""
    try:
        catalog = ProfileCatalogService().merge_catalog()
    except OSError as e:
        fail(f"Unable to list profiles: {e}")

    for profile_id in catalog:
        click.echo(profile_id)


@cli.command()
@click.pass_obj
def current(settings: AuthProfileSettings):
    """Show the active profile and its features."""
    try:
        record = ActiveProfileLoader(settings=settings).read_active()
    except (OSError, ProfileLoadError) as e:
        fail(f"Unable to read active profile: {e}")

    if record is None:
        click.echo("No existing configuration detected.")
        sys.exit(EXIT_NOT_CONFIGURED)

    click.echo(f"Profile ID: {record.profile_id}")
    click.echo("Enabled features:")
    if not record.features:
        click.echo("  None")
    for feature in record.features:
        click.echo(f"  - {feature}")


@cli.command()
@click.pass_obj
def check(settings: AuthProfileSettings):
    """Check that the host matches the active profile."""
    try:
        result = ConfigurationVerifier(settings=settings).verify_active_configuration()
    except (OSError, ProfileLoadError) as e:
        fail(f"Unable to check configuration: {e}")

    if result.state == VerificationState.NOT_CONFIGURED:
        click.echo("No existing configuration detected.")
        if not result.valid:
            click.echo("Leftovers of a previous configuration were found:")
            echo_diagnostics(result.diagnostics)
            sys.exit(EXIT_INVALID)
        sys.exit(EXIT_NOT_CONFIGURED)

    if result.valid:
        click.echo("Current configuration is valid.")
        return

    click.echo("Current configuration is not valid. It was probably modified outside authprofile.")
    echo_diagnostics(result.diagnostics)
    sys.exit(EXIT_INVALID)


@cli.command()
@click.pass_obj
def leftovers(settings: AuthProfileSettings):
    """Check that no generated files or links remain."""
    try:
        result = ConfigurationVerifier(settings=settings).check_leftovers()
    except OSError as e:
        fail(f"Unable to check leftovers: {e}")

    if result.valid:
        click.echo("No leftovers found.")
        return

    click.echo("Leftovers found:")
    echo_diagnostics(result.diagnostics)
    sys.exit(EXIT_INVALID)


@cli.command()
@click.pass_obj
def conflicts(settings: AuthProfileSettings):
    """Check whether installing a profile would overwrite existing files."""
    try:
        result = ConfigurationVerifier(settings=settings).check_install_conflicts()
    except OSError as e:
        fail(f"Unable to check conflicts: {e}")

    if not result.conflicts_exist:
        click.echo("No conflicting files found.")
        return

    click.echo("Existing files would be overwritten:")
    echo_diagnostics(result.diagnostics)
    sys.exit(EXIT_INVALID)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
