# secureguard/ai.py
"""
AI-assisted URL assessment.

The adapter sends one prompt per check to a text-generation provider and
turns the free-text answer into an `AiAssessment`:

- The prompt asks for a closing line "SAFETY_SCORE: <integer>". The first such
  token (case-insensitive) is the score, clamped to 0..100, and is removed
  from the explanation shown to the user.
- Without the token, a score is inferred from keywords in the answer.
- Any provider failure degrades to an assessment with no score and a fixed
  explanation. One attempt per check, no retries.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Mapping

import httpx

from secureguard.config import DEFAULT_CONFIG
from secureguard.errors import AiAdapterError
from secureguard.models import AiAssessment, NormalizedUrl
from secureguard.scoring import ai_label, clamp_score

log = logging.getLogger(__name__)

DEFAULT_MODEL = DEFAULT_CONFIG["ai"]["model"]
DEFAULT_ENDPOINT = DEFAULT_CONFIG["ai"]["endpoint"]
DEFAULT_TIMEOUT = DEFAULT_CONFIG["ai"]["timeout"]

UNAVAILABLE_MESSAGE = (
    "Unable to get AI analysis. Please check your API key and try again."
)

SAFETY_SCORE_RE = re.compile(r"SAFETY_SCORE:\s*(\d+)", re.IGNORECASE)

PROMPT_TEMPLATE = """\
Analyze this URL for potential security risks: {url}

Based only on the URL itself, provide a security assessment covering:
1. Is this likely to be a legitimate website or potentially malicious?
2. Are there any red flags in the domain name or URL structure?
3. What is the purpose of this website based on the URL?
4. What precautions should a user take when visiting this site?

Format your response as 2 short paragraphs.

Additionally, on a separate line at the very end, provide a safety score from \
0-100 where 100 is completely safe and 0 is definitely malicious. Format it \
exactly like this: "SAFETY_SCORE: [number]"
"""

# Keyword fallback, checked in this order. The first group that matches wins.
DANGER_WORDS = ("malicious", "phishing", "scam")
CAUTION_WORDS = ("caution", "suspicious")
LEGITIMATE_WORD = "legitimate"

DANGER_SCORE = 20
CAUTION_SCORE = 50
LEGITIMATE_SCORE = 85
NEUTRAL_SCORE = 65


def build_prompt(canonical_url: str) -> str:
    return PROMPT_TEMPLATE.format(url=canonical_url)


def infer_score(text: str) -> int:
    """Guess a score from wording when the provider omitted SAFETY_SCORE."""
    lowered = text.lower()
    if any(w in lowered for w in DANGER_WORDS):
        return DANGER_SCORE
    if any(w in lowered for w in CAUTION_WORDS):
        return CAUTION_SCORE
    if (
        LEGITIMATE_WORD in lowered
        and "malicious" not in lowered
        and "suspicious" not in lowered
    ):
        return LEGITIMATE_SCORE
    return NEUTRAL_SCORE


def parse_response(text: str) -> AiAssessment:
    """Turn the provider's answer into an assessment with a score and label."""
    match = SAFETY_SCORE_RE.search(text)
    if match:
        score = clamp_score(int(match.group(1)))
        explanation = (text[: match.start()] + text[match.end():]).strip()
    else:
        log.info("No SAFETY_SCORE token in AI response; inferring from wording.")
        score = infer_score(text)
        explanation = text.strip()
    return AiAssessment(score=score, label=ai_label(score), explanation=explanation)


def unavailable() -> AiAssessment:
    """The degraded assessment used when the provider call fails."""
    return AiAssessment(score=None, label=None, explanation=UNAVAILABLE_MESSAGE)


class AssessmentProvider(ABC):
    """A text-generation backend that answers one prompt with one text."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        ...

    @property
    @abstractmethod
    def model_id(self) -> str:
        ...


def _extract_text(data: Any) -> str:
    """Pull the generated text out of a generateContent response body."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
        text = "".join(p.get("text", "") for p in parts)
    except (KeyError, IndexError, TypeError) as e:
        raise AiAdapterError(f"Unexpected response shape: {e!r}") from e
    # Empty text is passed on and scored by the keyword fallback.
    return text


class GeminiProvider(AssessmentProvider):
    """Google Generative Language REST API over httpx."""

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        *,
        endpoint: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._model = model or DEFAULT_MODEL
        self._endpoint = (endpoint or DEFAULT_ENDPOINT).rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls,
        api_key: str,
        config: Mapping[str, Any],
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "GeminiProvider":
        ai_cfg = config.get("ai", {})
        return cls(
            api_key,
            ai_cfg.get("model"),
            endpoint=ai_cfg.get("endpoint"),
            timeout=float(ai_cfg.get("timeout", DEFAULT_TIMEOUT)),
            transport=transport,
        )

    @property
    def model_id(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        url = f"{self._endpoint}/models/{self._model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            resp = await client.post(
                url, json=payload, headers={"x-goog-api-key": self._api_key}
            )
            if resp.status_code != 200:
                log.warning("Non-200 response from %s: %d", self._model, resp.status_code)
            resp.raise_for_status()
            try:
                data = resp.json()
            except ValueError as e:
                raise AiAdapterError("Provider returned invalid JSON") from e
        return _extract_text(data)


async def assess(url: NormalizedUrl, provider: AssessmentProvider) -> AiAssessment:
    """
    Ask `provider` about `url` and parse the answer.

    Never raises for provider problems: a failed call is logged and the
    degraded assessment is returned so the check can go on heuristic-only.
    """
    prompt = build_prompt(url.canonical)
    try:
        text = await provider.complete(prompt)
    except Exception:
        log.warning(
            "AI assessment failed for %s on %s", url.canonical, provider.model_id,
            exc_info=True,
        )
        return unavailable()

    assessment = parse_response(text)
    log.info("AI assessment for %s: %s (%s)", url.canonical, assessment.score, assessment.label)
    return assessment
