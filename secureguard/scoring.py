# Implements score blending and the threshold labels shared across the package.

from __future__ import annotations

from secureguard.models import (
    CAUTION_THRESHOLD,
    SAFE_THRESHOLD,
    AiAssessment,
    AiLabel,
    SafetyLevel,
    ScoreReport,
)

# (heuristic weight, AI weight), in tenths
KNOWN_DOMAIN_WEIGHTS = (3, 7)
DEFAULT_WEIGHTS = (5, 5)


def clamp_score(value: int) -> int:
    return max(0, min(100, value))


def blend(base: ScoreReport, ai: AiAssessment | None, is_known_domain: bool) -> int:
    """
    Combine the heuristic score with the AI score.

    For hosts on the known-domain allow-list the AI gets 70% of the weight,
    since heuristic false positives are more likely there; otherwise both
    scores count equally. Without a usable AI score the heuristic score is
    returned unchanged.

    The weighted sum is rounded half up: 0.5 * 80 + 0.5 * 81 -> 81.
    """
    if ai is None or ai.score is None:
        return base.score

    base_weight, ai_weight = KNOWN_DOMAIN_WEIGHTS if is_known_domain else DEFAULT_WEIGHTS
    # Both scores are non-negative, so (sum + 5) // 10 rounds half up exactly.
    weighted = base_weight * base.score + ai_weight * ai.score
    return clamp_score((weighted + 5) // 10)


def safety_level(score: int) -> SafetyLevel:
    """Label for a final (blended or heuristic) score."""
    if score >= SAFE_THRESHOLD:
        return "Safe"
    if score >= CAUTION_THRESHOLD:
        return "Potentially Risky"
    return "Dangerous"


def ai_label(score: int) -> AiLabel:
    """Label for an AI confidence score."""
    if score >= SAFE_THRESHOLD:
        return "Safe"
    if score >= CAUTION_THRESHOLD:
        return "Exercise Caution"
    return "Potentially Unsafe"
