from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .kinds import CHANGE_CAUSE_ANNOTATION, REVISION_ANNOTATION, WorkloadKind

logger = logging.getLogger(__name__)


def parse_revision(raw: Any) -> Optional[int]:
    """Parse a revision value; ``None`` for missing, malformed or negative values."""

    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def record_revision(wk: WorkloadKind, record: Dict[str, Any]) -> Optional[int]:
    if wk.record_kind == "ControllerRevision":
        return parse_revision(record.get("revision"))
    annotations = (record.get("metadata") or {}).get("annotations") or {}
    return parse_revision(annotations.get(REVISION_ANNOTATION))


def record_template(record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Pod template stored on a ReplicaSet or a ControllerRevision snapshot."""

    spec = record.get("spec")
    if spec is None:
        spec = (record.get("data") or {}).get("spec")
    template = (spec or {}).get("template")
    return template if isinstance(template, dict) else None


def workload_revision(workload: Dict[str, Any]) -> Optional[int]:
    annotations = (workload.get("metadata") or {}).get("annotations") or {}
    return parse_revision(annotations.get(REVISION_ANNOTATION))


@dataclass(frozen=True)
class RevisionEntry:
    revision: int
    change_cause: str
    record: Dict[str, Any]

    @property
    def name(self) -> str:
        return str((self.record.get("metadata") or {}).get("name") or "")

    @property
    def template(self) -> Optional[Dict[str, Any]]:
        return record_template(self.record)


class RevisionIndex:
    """Ordered view over a workload's revision records.

    Records whose revision cannot be parsed are skipped with a warning so one
    corrupt object never hides the rest of the history.
    """

    def __init__(self, entries: Iterable[RevisionEntry]) -> None:
        by_rev: Dict[int, RevisionEntry] = {}
        for e in entries:
            prev = by_rev.get(e.revision)
            if prev is None or _created(e.record) >= _created(prev.record):
                by_rev[e.revision] = e
        self._entries: List[RevisionEntry] = [by_rev[r] for r in sorted(by_rev)]

    @classmethod
    def build(cls, wk: WorkloadKind, records: Iterable[Dict[str, Any]]) -> "RevisionIndex":
        entries: List[RevisionEntry] = []
        for record in records:
            meta = record.get("metadata") or {}
            revision = record_revision(wk, record)
            if revision is None:
                logger.warning(
                    "skipping %s %s/%s: missing or malformed revision",
                    wk.record_kind,
                    meta.get("namespace"),
                    meta.get("name"),
                )
                continue
            cause = (meta.get("annotations") or {}).get(CHANGE_CAUSE_ANNOTATION) or ""
            entries.append(RevisionEntry(revision=revision, change_cause=str(cause), record=record))
        return cls(entries)

    def __iter__(self) -> Iterator[RevisionEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, revision: int) -> Optional[RevisionEntry]:
        for e in self._entries:
            if e.revision == revision:
                return e
        return None

    def latest(self) -> Optional[RevisionEntry]:
        return self._entries[-1] if self._entries else None

    def previous(self, current: int) -> Optional[RevisionEntry]:
        """Highest revision strictly below ``current``."""

        older = [e for e in self._entries if e.revision < current]
        return older[-1] if older else None


def _created(record: Dict[str, Any]) -> str:
    # RFC 3339 timestamps from the API server sort lexically.
    return str((record.get("metadata") or {}).get("creationTimestamp") or "")
