"""
Configuration management for PenPard.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Project .env file (.penpard/.env)
3. Global config file (~/.penpard/config.yml)
4. Default values (lowest priority)
"""

from .getters import (
    DEFAULT_ENHANCE_CONCURRENCY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_MAX_ATTEMPTS,
    get_api_key,
    get_config,
    get_enhance_concurrency,
    get_llm_base_url,
    get_llm_model,
    get_llm_provider,
    get_poll_interval,
    get_poll_max_attempts,
    is_verbose,
    load_env_file,
    load_global_config,
    load_project_config,
)
from .project_setup import (
    create_project_config_template,
    ensure_project_storage_dir,
    get_project_db_path,
    get_project_env_path,
    get_project_storage_dir,
    get_reports_dir,
    global_config_dir,
    is_global_config_dir,
)

__all__ = [
    # getters
    "DEFAULT_ENHANCE_CONCURRENCY",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_POLL_MAX_ATTEMPTS",
    "get_api_key",
    "get_config",
    "get_enhance_concurrency",
    "get_llm_base_url",
    "get_llm_model",
    "get_llm_provider",
    "get_poll_interval",
    "get_poll_max_attempts",
    "is_verbose",
    "load_env_file",
    "load_global_config",
    "load_project_config",
    # project_setup
    "create_project_config_template",
    "ensure_project_storage_dir",
    "get_project_db_path",
    "get_project_env_path",
    "get_project_storage_dir",
    "get_reports_dir",
    "global_config_dir",
    "is_global_config_dir",
]
