from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from board_meeting.domain.entities.agenda import MonevStatus

DONE_STATUSES = frozenset({"DONE", "SELESAI", "COMPLETED"})
IN_PROGRESS_STATUSES = frozenset({"ON_PROGRESS", "IN_PROGRESS", "PROGRESS"})


def _normalize(status: Any) -> str:
    if status is None:
        return ""
    return str(status).strip().upper()


def is_done_status(status: Any) -> bool:
    return _normalize(status) in DONE_STATUSES


def is_in_progress_status(status: Any) -> bool:
    return _normalize(status) in IN_PROGRESS_STATUSES


def _item_status(item: Any) -> Optional[str]:
    if isinstance(item, Mapping):
        return item.get("status")
    return None


@dataclass(frozen=True)
class MonevSummary:
    done: int = 0
    in_progress: int = 0
    total: int = 0

    def __add__(self, other: "MonevSummary") -> "MonevSummary":
        return MonevSummary(
            done=self.done + other.done,
            in_progress=self.in_progress + other.in_progress,
            total=self.total + other.total,
        )

    def to_dict(self) -> dict:
        return {"inProgress": self.in_progress, "done": self.done, "total": self.total}


def summarize_items(items: Iterable[Any]) -> MonevSummary:
    """Count follow-up items by status.

    Items without a status have not been touched by monev yet and count as
    in progress. Unrecognised statuses only count toward the total.
    """
    done = in_progress = total = 0
    for item in items:
        total += 1
        status = _item_status(item)
        if is_done_status(status):
            done += 1
        elif is_in_progress_status(status) or not _normalize(status):
            in_progress += 1
    return MonevSummary(done=done, in_progress=in_progress, total=total)


def compute_monev_status(items: Iterable[Any]) -> str:
    if all(is_done_status(_item_status(item)) for item in items):
        return MonevStatus.DONE
    return MonevStatus.ON_PROGRESS


def describe_summary(summary: MonevSummary) -> str:
    if summary.total == 0:
        return "Belum ada tindak lanjut"
    if summary.done == summary.total:
        return f"Selesai ({summary.done}/{summary.total})"
    return f"{summary.done}/{summary.total} selesai, {summary.in_progress} on progress"
