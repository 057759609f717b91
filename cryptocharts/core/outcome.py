from __future__ import annotations

import traceback
from dataclasses import dataclass

from cryptocharts.core.models import Snapshot


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one fetch cycle: either a snapshot or the error that aborted it."""

    snapshot: Snapshot | None = None
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if (self.snapshot is None) == (self.error is None):
            raise ValueError("FetchOutcome needs exactly one of snapshot or error")  # noqa: TRY003

    @classmethod
    def success(cls, snapshot: Snapshot) -> FetchOutcome:
        return cls(snapshot=snapshot)

    @classmethod
    def failure(cls, error: BaseException) -> FetchOutcome:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> str | None:
        return type(self.error).__name__ if self.error is not None else None

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error is not None else None

    @property
    def trace(self) -> str | None:
        # Includes the "The above exception was the direct cause..." chain
        if self.error is None:
            return None
        return "".join(traceback.format_exception(self.error))
