"""CLI interface for the server setup tool."""
import dataclasses
from typing import Optional

import typer
from . import config as profiles
from . import utils
from . import steps


def setup(
    profile: str = typer.Option(profiles.DEFAULT_PROFILE, "--profile", help="Package set, shell framework and ssh port to use"),
    prompt_attempts: Optional[int] = typer.Option(None, "--prompt-attempts", min=1, help="Give up after this many invalid answers"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Harden a fresh server and create an administrative user."""
    utils.setup_logging(verbose)

    try:
        config = profiles.get_profile(profile)
    except KeyError as e:
        raise typer.BadParameter(e.args[0], param_hint="--profile")

    if not utils.is_root():
        typer.echo("❗ Run this script as root user")
        raise typer.Exit(1)

    if prompt_attempts is not None:
        config = dataclasses.replace(config, prompt_attempts=prompt_attempts)

    try:
        report = steps.provision_system(config)
    except typer.Abort:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(1)

    if report.username:
        typer.echo(f"✅ All Done! Make sure to update password for {report.username}")


app = typer.Typer(
    name="server-setup",
    help="Harden a fresh server and provision an admin user.",
    add_completion=False,
    invoke_without_command=True,
    callback=setup,
)


if __name__ == "__main__":
    app()
