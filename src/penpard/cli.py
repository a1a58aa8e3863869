"""PenPard command line interface.

Command modules register on the shared ``app`` and resolve their
collaborators from this module at call time.
"""

import typer

from penpard.ai.llm import resolve_provider_config
from penpard.config import (
    create_project_config_template,
    ensure_project_storage_dir,
    get_enhance_concurrency,
    get_poll_interval,
    get_poll_max_attempts,
    get_project_db_path,
    get_reports_dir,
    is_verbose,
)
from penpard.db.init import init_db
from penpard.modules.report import ArtifactStorage, ReportService
from penpard.modules.store import FindingStore
from penpard.utils.async_utils import safe_async_run
from penpard.utils.log_setup import configure_logging

from .cli_commands.shared import app, console, get_project_dir, require_project

# Register commands on the shared app.
from .cli_commands import project_init as _project_init  # noqa: F401,E402
from .cli_commands import report_command as _report_command  # noqa: F401,E402
from .cli_commands import scan_command as _scan_command  # noqa: F401,E402
from .cli_commands import track_command as _track_command  # noqa: F401,E402

__all__ = [
    "ArtifactStorage",
    "FindingStore",
    "ReportService",
    "app",
    "console",
    "create_project_config_template",
    "ensure_project_storage_dir",
    "get_enhance_concurrency",
    "get_poll_interval",
    "get_poll_max_attempts",
    "get_project_db_path",
    "get_project_dir",
    "get_reports_dir",
    "init_db",
    "main",
    "require_project",
    "resolve_provider_config",
    "safe_async_run",
]


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose or is_verbose())


@app.command()
def version() -> None:
    """Show the installed PenPard version."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as pkg_version

    try:
        current_version = pkg_version("penpard")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"PenPard {current_version}")


def main():
    """Entry point for the CLI."""
    app()
