"""Filesystem storage for report artifacts."""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class ArtifactStorage:
    """Byte-stream persistence for rendered reports, addressed by path."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def write(self, content: bytes, filename: str) -> Path:
        """Write content under the storage root, replacing any previous file."""
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.root / Path(filename).name
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=target.suffix)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(content), target)
        return target

    def exists(self, path: str | Path) -> bool:
        return Path(path).is_file()

    def read(self, path: str | Path) -> bytes:
        return Path(path).read_bytes()
