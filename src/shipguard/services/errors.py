"""Failure reporting shared by every rule handler.

Nothing in the ship-date rules is allowed to abort the order edit. Instead of
raising, collaborators report a typed :class:`Failure` through a
:class:`FailureLog`, which logs it and keeps it for inspection.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    EXTERNAL_SERVICE = "external_service"
    DATA_QUALITY = "data_quality"
    UNEXPECTED = "unexpected"


@dataclass(slots=True)
class Failure:
    kind: FailureKind
    operation: str
    message: str
    error: Optional[BaseException] = None

    def as_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "operation": self.operation, "message": self.message}


@dataclass(slots=True)
class FailureLog:
    """Collects failures reported during one editing session."""

    failures: list[Failure] = field(default_factory=list)

    def report(
        self,
        kind: FailureKind,
        operation: str,
        message: str,
        error: Optional[BaseException] = None,
    ) -> Failure:
        failure = Failure(kind=kind, operation=operation, message=message, error=error)
        if kind is FailureKind.UNEXPECTED:
            logger.error(f"{operation}: {message}", exc_info=error)
        elif kind is FailureKind.DATA_QUALITY:
            logger.warning(f"{operation}: {message}")
        else:
            logger.error(f"{operation}: {message}")
        self.failures.append(failure)
        return failure

    def kinds(self) -> list[FailureKind]:
        return [failure.kind for failure in self.failures]

    def drain(self) -> list[Failure]:
        drained, self.failures = self.failures, []
        return drained


def handler_boundary(operation: str, default: Any = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Turn any exception escaping a handler method into an UNEXPECTED failure.

    The decorated method's instance must expose a ``failures`` attribute.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(self, *args: Any, **kwargs: Any) -> T:
            try:
                return func(self, *args, **kwargs)
            except Exception as exc:
                self.failures.report(FailureKind.UNEXPECTED, operation, str(exc), exc)
                return default

        return wrapper

    return decorator
