"""Per-node results of a parallel dispatch."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class ExecResult(Generic[T]):
    """Outcome of applying a function to a single node.

    Exactly one of ``output`` and ``error`` is meaningful: ``error`` is set
    when the function raised, ``output`` holds its return value otherwise.
    """

    host: str
    output: T | None
    elapsed_ms: int
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True when the function returned without raising."""
        return self.error is None

    def unwrap(self) -> T:
        """Return the output, re-raising the captured error if there was one."""
        if self.error is not None:
            raise self.error
        return self.output  # type: ignore[return-value]
