"""Project storage directory and environment setup."""

import hashlib
import logging
import os
import re
from pathlib import Path

logger = logging.getLogger(__name__)

MARKER_NAME = ".penpard"
DB_FILENAME = "penpard.db"
REPORTS_DIRNAME = "reports"


def global_config_dir() -> Path:
    """Per-user directory holding config.yml; shares its name with the project marker."""
    return Path.home() / MARKER_NAME


def is_global_config_dir(path: Path) -> bool:
    home_dir = global_config_dir()
    if path.exists() and home_dir.exists():
        return path.samefile(home_dir)
    return path.absolute() == home_dir.absolute()


def _storage_name(project_dir: Path) -> str:
    slug = re.sub(r"[^a-zA-Z0-9_-]+", "-", project_dir.name).strip("-") or "project"
    digest = hashlib.sha1(str(project_dir).encode()).hexdigest()[:8]
    return f"{slug}-{digest}"


def get_project_storage_dir(project_dir: Path | None) -> Path | None:
    """Resolve the storage directory for a project (.penpard or data dir)."""
    if project_dir is None:
        return None

    marker = project_dir / MARKER_NAME
    if marker.is_file():
        try:
            target = marker.read_text().strip()
            if target:
                return Path(target)
        except (FileNotFoundError, PermissionError, UnicodeDecodeError, OSError) as e:
            logger.warning(
                "Could not read project storage path from marker %s: %s",
                marker,
                e,
                exc_info=True,
            )
            return None

    if marker.is_dir():
        # The global ~/.penpard config dir is not a project marker.
        if is_global_config_dir(marker) and not (marker / DB_FILENAME).exists():
            return None
        return marker

    data_root = os.environ.get("PENPARD_DATA_DIR")
    if data_root:
        return Path(data_root) / _storage_name(project_dir)

    return marker


def ensure_project_storage_dir(project_dir: Path) -> Path:
    """Ensure the project storage directory exists and return it."""
    marker = project_dir / MARKER_NAME
    if marker.is_dir():
        return marker

    if marker.is_file():
        target = marker.read_text().strip()
        if not target:
            raise ValueError("Project marker file is empty.")
        storage = Path(target)
        storage.mkdir(parents=True, exist_ok=True)
        return storage

    storage = get_project_storage_dir(project_dir)
    if storage is None:
        raise ValueError("Unable to resolve project storage directory.")

    storage.mkdir(parents=True, exist_ok=True)

    # A data-dir storage location is recorded in a marker file.
    if storage != marker:
        marker.write_text(str(storage))
    else:
        marker.mkdir(exist_ok=True)

    return storage


def get_project_db_path(project_dir: Path | None) -> Path | None:
    """Get the project database path."""
    storage = get_project_storage_dir(project_dir)
    if storage is None:
        return None
    return storage / DB_FILENAME


def get_project_env_path(project_dir: Path | None) -> Path | None:
    """Get the project .env path."""
    storage = get_project_storage_dir(project_dir)
    if storage is None:
        return None
    return storage / ".env"


def get_reports_dir(project_dir: Path | None) -> Path | None:
    """Get the directory where report artifacts are written."""
    storage = get_project_storage_dir(project_dir)
    if storage is None:
        return None
    return storage / REPORTS_DIRNAME


def create_project_config_template(project_dir: Path) -> Path:
    """Create a .env template file in the project storage directory."""
    storage_dir = ensure_project_storage_dir(project_dir)
    env_path = storage_dir / ".env"

    if not env_path.exists():
        template = """# PenPard configuration
# Uncomment and fill in your values

# Fallback provider when no provider is activated in the database
# Provider: anthropic | openai | openrouter | deepseek | gemini | ollama
# PENPARD_LLM_PROVIDER=anthropic
# PENPARD_LLM_API_KEY=your-api-key-here
# PENPARD_LLM_MODEL=claude-sonnet-4-5
# PENPARD_LLM_BASE_URL=https://api.example.com/v1

# Analysis tracking
# PENPARD_POLL_INTERVAL=5
# PENPARD_POLL_MAX_ATTEMPTS=60

# Report enhancement: in-flight generations per batch
# PENPARD_ENHANCE_CONCURRENCY=4

# PENPARD_VERBOSE=false
"""
        env_path.write_text(template)

    return env_path
