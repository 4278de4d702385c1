"""Typed outcome returned by every SDK operation."""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from tc_cli.core.client import CLIError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Either a value or a CLIError.

    A successful result may carry None or an empty collection: that is the
    service saying "nothing matched" or "nothing created", not a failure.
    """

    value: T | None = None
    error: CLIError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> str | None:
        """Failure kind, or None on success."""
        return self.error.kind if self.error else None

    def unwrap(self) -> T:
        """Return the value or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def value_or(self, default: Any) -> Any:
        return default if self.error is not None else self.value

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CLIError) -> "Result[T]":
        return cls(error=error)
