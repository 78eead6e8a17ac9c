"""Tagged result envelope used at the boundary of the core."""

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from app.core.exceptions import GuaranteeCoreException

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    kind: str
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Either ``ok=True`` with a ``value`` or ``ok=False`` with an ``error``.

    Only core exceptions are converted; anything else is a bug and keeps
    propagating.
    """

    ok: bool
    value: T | None = None
    error: ErrorInfo | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, exc: GuaranteeCoreException) -> "Result[T]":
        return cls(ok=False, error=ErrorInfo(kind=exc.kind, message=exc.message or str(exc)))

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "value": self.value}
        return {"ok": False, "error": {"kind": self.error.kind, "message": self.error.message}}


def capture(func: Callable[..., T], *args: Any, **kwargs: Any) -> Result[T]:
    """Call ``func`` and wrap its outcome in a Result."""
    try:
        return Result.success(func(*args, **kwargs))
    except GuaranteeCoreException as exc:
        return Result.failure(exc)
