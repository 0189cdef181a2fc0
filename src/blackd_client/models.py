"""Domain models for daemon-backed formatting runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import ErrorKind
from .versions import TargetVersion

MIN_LINE_LENGTH = 1
MAX_LINE_LENGTH = 255
DEFAULT_LINE_LENGTH = 88


@dataclass(frozen=True, slots=True)
class FormatConfiguration:
    """Formatting options shared by every file of a run."""

    line_length: int = DEFAULT_LINE_LENGTH
    target_versions: tuple[TargetVersion, ...] = ()
    skip_string_normalization: bool = False
    skip_magic_trailing_comma: bool = False
    fast: bool = False
    safe: bool = False
    diff: bool = False

    def __post_init__(self) -> None:
        if not MIN_LINE_LENGTH <= self.line_length <= MAX_LINE_LENGTH:
            raise ValueError(
                f"line_length must be between {MIN_LINE_LENGTH} and {MAX_LINE_LENGTH}, got {self.line_length}"
            )

    @property
    def fast_mode(self) -> bool:
        """Fast mode wins only when safe mode was not explicitly requested."""

        return self.fast and not self.safe


class OutcomeStatus(str, Enum):
    REWRITTEN = "rewritten"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FormatOutcome:
    """Result of formatting a single target file."""

    path: Path
    status: OutcomeStatus
    reason: str | None = None
    error_kind: ErrorKind | None = None
    diff: str | None = None

    @property
    def rewritten(self) -> bool:
        return self.status is OutcomeStatus.REWRITTEN


@dataclass(slots=True)
class BatchFormatResult:
    """Aggregate outcomes for an ordered list of target files."""

    outcomes: list[FormatOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def reformatted(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.rewritten)

    @property
    def left_unchanged(self) -> int:
        return len(self.outcomes) - self.reformatted

    @property
    def failures(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is OutcomeStatus.FAILED)


__all__ = [
    "FormatConfiguration",
    "OutcomeStatus",
    "FormatOutcome",
    "BatchFormatResult",
]
