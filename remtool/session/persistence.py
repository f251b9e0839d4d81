"""Session snapshots on disk.

A snapshot holds everything an export stage needs: the issue list with its
current statuses and final values, the remediation ledger, and the score.

The file has this structure:
{
    "version": "1.0",
    "document": "report.pdf",
    "page_count": 12,
    "score": {"overall": 91, "grade": "A", "category_scores": {...}},
    "issues": [{"id": "issue-0", "type": "missing-alt-text", ...}],
    "remediations": [{"issue_id": "issue-0", "action": "accepted", ...}]
}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from remtool.models import Issue, RemediationRecord, Score

from .store import IssueStore

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1.0"


class SessionSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str = SNAPSHOT_VERSION
    document: str | None = None
    page_count: int = Field(default=0, ge=0)
    score: Score | None = None
    issues: list[Issue] = Field(default_factory=list)
    remediations: list[RemediationRecord] = Field(default_factory=list)

    @classmethod
    def from_store(
        cls,
        store: IssueStore,
        *,
        score: Score | None = None,
        document: str | None = None,
        page_count: int = 0,
    ) -> "SessionSnapshot":
        return cls(
            document=document,
            page_count=page_count,
            score=score,
            issues=[issue.model_copy(deep=True) for issue in store.issues],
            remediations=store.remediations,
        )

    def to_store(self) -> IssueStore:
        """Rebuild a store with the saved ids, statuses and ledger."""
        store = IssueStore()
        store.load_state(
            [issue.model_copy(deep=True) for issue in self.issues],
            self.remediations,
        )
        return store


def save_snapshot(snapshot: SessionSnapshot, path: Path) -> Path:
    """Write the snapshot atomically (temp file, then rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(snapshot.model_dump_json(indent=2))
        temp_file.replace(path)
    except OSError:
        logger.warning("Could not save session snapshot to %s", path)
        if temp_file.exists():
            temp_file.unlink()
        raise
    return path


def load_snapshot(path: Path) -> SessionSnapshot:
    """Read a snapshot written by ``save_snapshot``.

    Raises:
        ValueError: If the file was written by an incompatible version.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    version = data.get("version") if isinstance(data, dict) else None
    if version != SNAPSHOT_VERSION:
        raise ValueError(
            f"Unsupported session snapshot version {version!r} (expected {SNAPSHOT_VERSION})"
        )
    return SessionSnapshot.model_validate(data)
