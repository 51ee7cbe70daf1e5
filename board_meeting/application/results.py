from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from board_meeting.domain.entities.errors import AgendaError

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Uniform outcome of a mutation: success flag plus optional error/message/data."""

    success: bool
    error: Optional[str] = None
    message: Optional[str] = None
    data: Any = None
    kind: Optional[str] = None

    @classmethod
    def ok(cls, message: Optional[str] = None, data: Any = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: str, kind: str = "internal") -> "ActionResult":
        return cls(success=False, error=error, kind=kind)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.error is not None:
            out["error"] = self.error
        if self.message is not None:
            out["message"] = self.message
        if self.data is not None:
            out["data"] = self.data
        return out


def action(tag: str, default_error: str) -> Callable:
    """Catch everything raised by an action and turn it into an ActionResult.

    Expected failures (AgendaError subclasses) keep their message and kind;
    anything else is logged with a traceback and reported with its message,
    or default_error when it has none.
    """

    def decorator(fn: Callable[..., ActionResult]) -> Callable[..., ActionResult]:
        @functools.wraps(fn)
        def wrapper(self, *args, **kwargs) -> ActionResult:
            try:
                return fn(self, *args, **kwargs)
            except AgendaError as e:
                _rollback(self)
                logger.warning("[%s] %s: %s", tag, e.kind, e)
                return ActionResult.fail(str(e) or default_error, e.kind)
            except Exception as e:
                _rollback(self)
                logger.exception("[%s] unexpected error: %s", tag, e)
                return ActionResult.fail(str(e) or default_error)

        return wrapper

    return decorator


def _rollback(use_case: Any) -> None:
    repo = getattr(use_case, "_repo", None)
    if repo is None:
        return
    try:
        repo.rollback()
    except Exception as e:  # pragma: no cover
        logger.error("rollback failed: %s", e)
