"""Main FindingStore class."""

from pathlib import Path

from sqlalchemy.orm import sessionmaker

from penpard.db.init import get_engine, init_db

from .finding_mixin import FindingMixin
from .provider_mixin import ProviderSettingMixin
from .report_mixin import ReportRowMixin
from .scan_mixin import ScanMixin
from .usage_mixin import TokenUsageMixin


class FindingStore(
    ScanMixin, FindingMixin, ReportRowMixin, ProviderSettingMixin, TokenUsageMixin
):
    """Owns the database session for scans, findings and report rows."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        init_db(self.db_path)
        self.engine = get_engine(db_path)
        # Loaded rows stay readable after commits.
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.session = self.session_factory()

    def close(self) -> None:
        self.session.close()
        self.engine.dispose()

    def __enter__(self) -> "FindingStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
