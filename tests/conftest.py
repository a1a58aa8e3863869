"""Test configuration and fixtures for PenPard."""

import tempfile
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from penpard.ai.llm import GenerationResponse
from penpard.db.init import init_db
from penpard.db.models import Scan
from penpard.modules.lifecycle import LifecycleManager
from penpard.modules.report import ArtifactStorage
from penpard.modules.store import FindingStore

CONFIG_ENV_KEYS = (
    "PENPARD_DATA_DIR",
    "PENPARD_LLM_PROVIDER",
    "PENPARD_LLM_API_KEY",
    "PENPARD_LLM_MODEL",
    "PENPARD_LLM_BASE_URL",
    "PENPARD_POLL_INTERVAL",
    "PENPARD_POLL_MAX_ATTEMPTS",
    "PENPARD_ENHANCE_CONCURRENCY",
    "PENPARD_VERBOSE",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "OPENROUTER_API_KEY",
    "GEMINI_API_KEY",
    "DEEPSEEK_API_KEY",
)

LONG_TEXT = (
    "The login endpoint concatenates the username parameter into a SQL query, "
    "allowing an attacker to bypass authentication and read arbitrary tables."
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory) -> None:
    """Keep the developer's environment and ~/.penpard out of every test."""
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    for key in CONFIG_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """Create a mock project directory structure."""
    project_path = temp_dir / "test_project"
    project_path.mkdir()
    (project_path / ".penpard").mkdir()
    return project_path


@pytest.fixture
def db_path(project_dir: Path) -> Path:
    """Return the database path for a project."""
    return project_dir / ".penpard" / "penpard.db"


@pytest.fixture
def initialized_db(db_path: Path) -> Path:
    """Initialize the database and return its path."""
    init_db(db_path)
    return db_path


@pytest.fixture
def store(initialized_db: Path) -> Generator[FindingStore, None, None]:
    """Create a finding store over an initialized database."""
    finding_store = FindingStore(initialized_db)
    yield finding_store
    finding_store.close()


@pytest.fixture
def storage(project_dir: Path) -> ArtifactStorage:
    return ArtifactStorage(project_dir / ".penpard" / "reports")


@pytest.fixture
def sample_scan(store: FindingStore) -> Scan:
    """A queued web scan owned by user 1."""
    return store.create_scan("https://app.example.com", user_id=1)


@pytest.fixture
def completed_scan(store: FindingStore, sample_scan: Scan) -> Scan:
    """A completed scan with critical, high and low findings, in that store order."""
    lifecycle = LifecycleManager(store)
    lifecycle.start(sample_scan.id)
    store.add_finding(
        sample_scan.id,
        "SQL Injection in login",
        "critical",
        "Login form is injectable.",
        cvss_score=9.8,
        cwe="CWE-89",
        request="POST /login\n\nusername=admin' OR 1=1--&password=x",
        response="HTTP/1.1 200 OK\n\nWelcome admin",
        evidence='{"payload": "admin\' OR 1=1--"}',
        remediation="Use parameterized queries.",
    )
    store.add_finding(
        sample_scan.id,
        "Reflected XSS in search",
        "high",
        "Search term is reflected unescaped.",
        cvss_score=7.4,
        cwe="CWE-79",
        request="GET /search?q=<script>alert(1)</script>",
        remediation="Encode output in HTML context.",
    )
    store.add_finding(
        sample_scan.id,
        "Verbose Server Banner",
        "low",
        "Server header discloses version.",
        cvss_score=3.1,
    )
    return lifecycle.complete(sample_scan.id)


@pytest.fixture
def text_provider() -> MagicMock:
    """A provider whose every generation returns the same valid paragraph."""
    provider = MagicMock()
    provider.generate.return_value = GenerationResponse(text=LONG_TEXT)
    return provider


@pytest.fixture
def failing_provider() -> MagicMock:
    """A provider that raises on every call."""
    from penpard.errors import ProviderUnavailable

    provider = MagicMock()
    provider.generate.side_effect = ProviderUnavailable("connection refused")
    return provider


@pytest.fixture
def mock_env_vars(monkeypatch) -> None:
    """Configure an OpenAI fallback provider through the environment."""
    monkeypatch.setenv("PENPARD_LLM_PROVIDER", "openai")
    monkeypatch.setenv("PENPARD_LLM_API_KEY", "test-key-12345")
    monkeypatch.setenv("PENPARD_LLM_MODEL", "gpt-4o")
