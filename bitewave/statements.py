"""Plain-text bill statements stored as files in the bills directory."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from bitewave.config import STATEMENT_PREFIX, STATEMENT_SUFFIX, STATEMENT_TIMESTAMP_FORMAT
from bitewave.errors import ArtifactWriteFailed, NotFound

logger = logging.getLogger(__name__)


def statement_name(order_id: int, issued_at: datetime) -> str:
    """
    File name for an order's statement: bill_order_<id>_<YYYYMMDD_HHMMSS>.txt.

    The timestamp is in the machine's local time zone. Naive datetimes are taken
    as local already.
    """
    local = issued_at.astimezone()
    return f"{STATEMENT_PREFIX}{order_id}_{local.strftime(STATEMENT_TIMESTAMP_FORMAT)}{STATEMENT_SUFFIX}"


def is_statement_name(name: str) -> bool:
    return (
        name.startswith(STATEMENT_PREFIX)
        and name.endswith(STATEMENT_SUFFIX)
        and Path(name).name == name
    )


class StatementArchive:
    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def write(self, name: str, text: str) -> Path:
        """Create a statement file. An existing file with the same name is not replaced."""
        path = self.directory / name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with path.open("x", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as exc:
            logger.error("Failed to write bill %s: %s", path, exc)
            raise ArtifactWriteFailed(f"Failed to write bill: {exc}", details={"name": name}) from exc
        logger.info("Wrote bill statement %s", path)
        return path

    def discard(self, name: str) -> None:
        """Remove a statement written for a bill that was not recorded."""
        path = self.directory / name
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove orphaned bill %s: %s", path, exc)
            return
        logger.info("Removed orphaned bill statement %s", path)

    def list_names(self) -> list[str]:
        """Statement names sorted by name, which is also issue order."""
        try:
            names = [path.name for path in self.directory.iterdir() if path.is_file() and is_statement_name(path.name)]
        except OSError as exc:
            logger.warning("Cannot list bills in %s: %s", self.directory, exc)
            return []
        return sorted(names)

    def read(self, name: str) -> str:
        if not is_statement_name(name):
            raise NotFound(f"No bill statement named {name!r}", details={"name": name})
        try:
            return (self.directory / name).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFound(f"No bill statement named {name!r}", details={"name": name}) from exc
