# Defines the data structures passed between the normalizer, scorer, AI adapter,
# blender and history store.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# Score thresholds shared by every labeling function. Presentation code reads
# these rather than recomputing its own cut-offs.
SAFE_THRESHOLD = 80
CAUTION_THRESHOLD = 50

SafetyLevel = Literal["Safe", "Potentially Risky", "Dangerous"]
AiLabel = Literal["Safe", "Exercise Caution", "Potentially Unsafe"]


@dataclass(frozen=True)
class NormalizedUrl:
    """A user-supplied URL and its scheme-qualified canonical form."""

    raw: str
    canonical: str
    scheme: str
    host: str
    path: str = ""


@dataclass(frozen=True)
class ScoreReport:
    """Outcome of the heuristic rules for one URL."""

    score: int
    warnings: tuple[str, ...] = ()
    positives: tuple[str, ...] = ()


@dataclass(frozen=True)
class AiAssessment:
    """
    The AI provider's view of a URL.

    A degraded assessment (provider unreachable, bad credential, ...) keeps the
    explanation text but has no score and no label.
    """

    score: int | None
    label: AiLabel | None
    explanation: str

    @property
    def available(self) -> bool:
        return self.score is not None


@dataclass(frozen=True)
class FinalResult:
    """
    The complete, immutable result of one check.

    `score` is the blended score when an AI score was available, otherwise the
    heuristic score. `safety_level` is derived from `score`.
    """

    url: str
    canonical_url: str
    score: int
    heuristic_score: int
    warnings: tuple[str, ...] = ()
    positives: tuple[str, ...] = ()
    ai: AiAssessment | None = None
    checked_at: int = 0  # milliseconds since epoch
    safety_level: SafetyLevel = "Dangerous"


@dataclass(frozen=True)
class HistoryRecord:
    """A persisted (url, score, timestamp) entry. `url` is the raw input."""

    url: str
    score: int
    timestamp: int


@dataclass
class CheckOutcome:
    """
    What a check hands back to its caller.

    Exactly one of `result` and `error` is set. `notices` carries non-fatal
    problems (e.g. the history could not be saved) alongside a valid result.
    """

    url: str
    result: FinalResult | None = None
    error: str | None = None
    notices: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None
