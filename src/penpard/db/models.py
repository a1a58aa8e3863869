"""Database models for PenPard using SQLAlchemy."""

import json
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship


def _utc_now() -> datetime:
    return datetime.now(UTC)


Base = declarative_base()


class ScanType(str, Enum):
    """Kinds of assessment a scan can run."""

    WEB = "web"
    MOBILE = "mobile"


class ScanStatus(str, Enum):
    """Lifecycle statuses of a scan."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    STOPPED = "stopped"


class Severity(str, Enum):
    """Finding severities, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class Scan(Base):
    """One security-assessment run against a target."""

    __tablename__ = "scans"

    id = Column(String, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String, nullable=False, default=ScanType.WEB.value)  # web, mobile
    target = Column(String, nullable=False)
    status = Column(String, nullable=False, default=ScanStatus.QUEUED.value, index=True)
    phase = Column(String, nullable=True)  # engine sub-status while running

    # Scan configuration
    rate_limit = Column(Integer, default=5)
    recursion_depth = Column(Integer, default=2)
    use_nuclei = Column(Boolean, default=False)
    use_ffuf = Column(Boolean, default=False)
    idor_users_json = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utc_now)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(Text, nullable=True)

    findings = relationship(
        "Finding",
        back_populates="scan",
        cascade="all, delete-orphan",
        order_by="Finding.id",
    )
    report = relationship(
        "Report", back_populates="scan", cascade="all, delete-orphan", uselist=False
    )

    @property
    def idor_users(self) -> list[dict]:
        """Test accounts used for authorization testing."""
        if not self.idor_users_json:
            return []
        try:
            users = json.loads(self.idor_users_json)
        except (TypeError, ValueError):
            return []
        return users if isinstance(users, list) else []


class Finding(Base):
    """A vulnerability discovered by the analysis engine."""

    __tablename__ = "vulnerabilities"

    id = Column(Integer, primary_key=True)
    scan_id = Column(String, ForeignKey("scans.id"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(Text)
    severity = Column(String, nullable=False)  # critical, high, medium, low, info
    cvss_score = Column(Float, nullable=True)
    cvss_vector = Column(String, nullable=True)
    cwe = Column(String, nullable=True)
    cve = Column(String, nullable=True)

    # Evidence
    request = Column(Text)
    response = Column(Text)
    evidence = Column(Text)
    screenshot_path = Column(String, nullable=True)

    remediation = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utc_now)

    scan = relationship("Scan", back_populates="findings")


class Report(Base):
    """The single stored report artifact of a scan."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True)
    scan_id = Column(String, ForeignKey("scans.id"), nullable=False, unique=True)
    file_path = Column(String, nullable=False)
    format = Column(String, default="pdf")
    created_at = Column(DateTime(timezone=True), default=_utc_now)

    scan = relationship("Scan", back_populates="report")


class ProviderSetting(Base):
    """Stored configuration of one text-generation provider."""

    __tablename__ = "llm_config"

    provider = Column(String, primary_key=True)
    api_key = Column(String, nullable=True)
    model = Column(String, nullable=True)
    is_active = Column(Boolean, default=False)
    settings_json = Column(Text, nullable=True)  # base_url, temperature, max_tokens
    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now)

    @property
    def settings(self) -> dict:
        if not self.settings_json:
            return {}
        try:
            data = json.loads(self.settings_json)
        except (TypeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}


class TokenUsage(Base):
    """Token accounting for one successful generation."""

    __tablename__ = "token_usage"

    id = Column(Integer, primary_key=True)
    provider = Column(String, nullable=False)
    model = Column(String, nullable=True)
    input_tokens = Column(Integer, default=0)
    output_tokens = Column(Integer, default=0)
    total_tokens = Column(Integer, default=0)
    scan_id = Column(String, nullable=True)
    context = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utc_now)
