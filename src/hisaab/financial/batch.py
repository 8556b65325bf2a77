"""Outcome of multi-item operations that isolate per-item failures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BatchResult:
    """Success count plus the errors of items that failed.

    A batch that ran is reported as successful even when some items failed;
    ``errors`` carries the partial-failure detail.
    """

    succeeded: int = 0
    errors: list[str] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return True

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict:
        return {
            "success": self.ok,
            "message": self.message,
            "succeeded": self.succeeded,
            "errors": list(self.errors),
        }
