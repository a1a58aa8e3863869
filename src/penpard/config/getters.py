"""Configuration getter functions."""

import os
from pathlib import Path
from typing import Any

import yaml

from .project_setup import get_project_env_path, global_config_dir

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_POLL_MAX_ATTEMPTS = 60
DEFAULT_ENHANCE_CONCURRENCY = 4
GLOBAL_CONFIG_FILE = "config.yml"


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = line.removeprefix("export ").partition("=")
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key.strip(), value


def load_env_file(env_path: Path) -> dict[str, str]:
    """Read KEY=VALUE pairs from a dotenv file; a missing file yields an empty dict."""
    if not env_path.is_file():
        return {}
    pairs = (_parse_env_line(line) for line in env_path.read_text().splitlines())
    return dict(pair for pair in pairs if pair)


def load_global_config() -> dict[str, Any]:
    """Settings from ~/.penpard/config.yml; anything but a YAML mapping is ignored."""
    config_path = global_config_dir() / GLOBAL_CONFIG_FILE
    if not config_path.is_file():
        return {}
    data = yaml.safe_load(config_path.read_text())
    return data if isinstance(data, dict) else {}


def load_project_config(project_dir: Path | None = None) -> dict[str, str]:
    """Settings from the project's .env file, if the project has one."""
    if project_dir is None:
        from penpard.cli_commands.shared import get_project_dir

        project_dir = get_project_dir()
    env_path = get_project_env_path(project_dir)
    return load_env_file(env_path) if env_path else {}


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        project_dir: Optional project directory
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # 1. Check environment variable
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    # 2. Check project .env file
    project_config = load_project_config(project_dir)
    if key in project_config:
        return project_config[key]

    # 3. Check global config
    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    # 4. Return default
    return default


def _get_number(key: str, project_dir: Path | None, default: float, cast: type) -> Any:
    raw = get_config(key, project_dir)
    if raw in (None, ""):
        return default
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def get_api_key(provider: str = "anthropic", project_dir: Path | None = None) -> str | None:
    """
    Get API key for a provider.

    The unified ``PENPARD_LLM_API_KEY`` wins over provider-specific keys.
    """
    unified = get_config("PENPARD_LLM_API_KEY", project_dir)
    if unified:
        return unified

    env_var = {
        "anthropic": "ANTHROPIC_API_KEY",
        "openai": "OPENAI_API_KEY",
        "openrouter": "OPENROUTER_API_KEY",
        "gemini": "GEMINI_API_KEY",
        "deepseek": "DEEPSEEK_API_KEY",
    }.get(provider, f"{provider.upper()}_API_KEY")

    return get_config(env_var, project_dir)


def get_llm_provider(project_dir: Path | None = None) -> str | None:
    """Get the fallback LLM provider name, if any."""
    return get_config("PENPARD_LLM_PROVIDER", project_dir)


def get_llm_model(project_dir: Path | None = None) -> str | None:
    """Get LLM model name."""
    return get_config("PENPARD_LLM_MODEL", project_dir)


def get_llm_base_url(project_dir: Path | None = None) -> str | None:
    """Get LLM base URL."""
    return get_config("PENPARD_LLM_BASE_URL", project_dir)


def get_poll_interval(project_dir: Path | None = None) -> float:
    """Seconds between analysis status queries."""
    return _get_number("PENPARD_POLL_INTERVAL", project_dir, DEFAULT_POLL_INTERVAL, float)


def get_poll_max_attempts(project_dir: Path | None = None) -> int:
    """Maximum number of status queries before the poller gives up."""
    return _get_number("PENPARD_POLL_MAX_ATTEMPTS", project_dir, DEFAULT_POLL_MAX_ATTEMPTS, int)


def get_enhance_concurrency(project_dir: Path | None = None) -> int:
    """Maximum in-flight generations per enhancement batch."""
    return _get_number(
        "PENPARD_ENHANCE_CONCURRENCY", project_dir, DEFAULT_ENHANCE_CONCURRENCY, int
    )


def is_verbose(project_dir: Path | None = None) -> bool:
    """Return True when verbose logging is requested."""
    value = str(get_config("PENPARD_VERBOSE", project_dir, default="")).strip().lower()
    return value in {"1", "true", "yes", "on"}
