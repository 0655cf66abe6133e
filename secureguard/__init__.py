# Entrypoint for the secureguard package.
# This file makes the public API available to programmers.

from __future__ import annotations

from secureguard.api import UrlChecker, check_url
from secureguard.heuristics import RuleSet, score_url
from secureguard.models import (
    AiAssessment,
    CheckOutcome,
    FinalResult,
    HistoryRecord,
    NormalizedUrl,
    ScoreReport,
)
from secureguard.normalize import normalize
from secureguard.scoring import blend
from secureguard.__about__ import __version__

# The __all__ variable defines the public API of the package.
# When a user writes `from secureguard import *`, only these names will be imported.
__all__ = [
    "check_url",
    "UrlChecker",
    "normalize",
    "score_url",
    "blend",
    "RuleSet",
    "AiAssessment",
    "CheckOutcome",
    "FinalResult",
    "HistoryRecord",
    "NormalizedUrl",
    "ScoreReport",
    "__version__",
]
