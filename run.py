#!/usr/bin/env python3
"""
Application Entry Script.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action check --debug
    python run.py --action config
    python run.py --action test --test-type unit
"""

import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from notes_app.core.logging import get_logger, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "check", "config", "test", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable INFO level logging.")
@click.option("--debug", "-d", is_flag=True, help="Enable DEBUG level logging.")
@click.option("--host", default=None, help="Server host (for server action).")
@click.option("--port", default=None, type=int, help="Server port (for server action).")
@click.option("--reload", is_flag=True, help="Enable auto-reload (for server action).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run (for test action).",
)
@click.option("--coverage", is_flag=True, help="Run tests with coverage (for test action).")
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
) -> None:
    """
    Notes backend entry point.

    Run the API server, validate configuration, view configuration,
    or run tests.
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console", enable_file_logging=False)
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "check":
        check_startup(logger)
    elif action == "config":
        show_config(logger)
    elif action == "test":
        run_tests(logger, test_type, coverage)
    elif action == "info":
        show_info()


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the API server with uvicorn."""
    from notes_app.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "notes_app.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]
    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def check_startup(logger) -> None:
    """Run the same configuration checks the server runs at startup."""
    from notes_app.core.startup_checks import StartupCheckError, run_startup_checks

    try:
        run_startup_checks()
    except StartupCheckError as e:
        click.echo(click.style(str(e), fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error("Configuration could not be loaded", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style("All startup checks passed.", fg="green"))


def show_config(logger) -> None:
    """Display loaded YAML configuration (secrets are never printed)."""
    from notes_app.core.config import get_app_config

    try:
        app_config = get_app_config()
    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)

    sections = {
        "Application": app_config.application,
        "Database": app_config.database,
        "Logging": app_config.logging,
        "Feature Flags": app_config.features,
        "Security": app_config.security,
        "Storage": app_config.storage,
        "Concurrency": app_config.concurrency,
    }
    for title, section in sections.items():
        click.echo(f"\n{title}:")
        click.echo("-" * 40)
        _echo_mapping(section.model_dump(), indent=2)

    logger.info("Configuration displayed successfully")


def _echo_mapping(values: dict, indent: int) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_mapping(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def run_tests(logger, test_type: str, coverage: bool) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})

    cmd = [sys.executable, "-m", "pytest"]
    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")
    cmd.append("-v")

    if coverage:
        cmd.extend(["--cov=notes_app", "--cov-report=term-missing"])

    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd)
        sys.exit(result.returncode)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install -e .[test]")
        sys.exit(1)


def show_info() -> None:
    """Display application information."""
    from notes_app.core.config import get_app_config

    app_config = get_app_config()
    click.echo(app_config.application.name)
    click.echo("=" * 40)
    click.echo(f"Version: {app_config.application.version}")
    click.echo(f"Description: {app_config.application.description}")
    click.echo(f"Storage backend: {app_config.storage.backend}")
    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server   Start the API server")
    click.echo("  --action check    Run startup configuration checks")
    click.echo("  --action config   Display configuration")
    click.echo("  --action test     Run test suite")
    click.echo("  --action info     Show this information")


if __name__ == "__main__":
    main()
