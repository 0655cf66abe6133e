import asyncio
import json

import httpx
import pytest

from secureguard.ai import (
    UNAVAILABLE_MESSAGE,
    AssessmentProvider,
    GeminiProvider,
    assess,
    build_prompt,
    infer_score,
    parse_response,
)
from secureguard.errors import AiAdapterError
from secureguard.normalize import normalize

# --- helpers ---------------------------------------------------------------


class StaticProvider(AssessmentProvider):
    def __init__(self, text: str):
        self.text = text
        self.prompts: list[str] = []

    @property
    def model_id(self) -> str:
        return "static"

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.text


class FailingProvider(AssessmentProvider):
    @property
    def model_id(self) -> str:
        return "failing"

    async def complete(self, prompt: str) -> str:
        raise httpx.ConnectError("connection refused")


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


# --- parsing ----------------------------------------------------------------


def test_prompt_embeds_canonical_url_and_score_format():
    prompt = build_prompt("https://example.com")
    assert "https://example.com" in prompt
    assert "SAFETY_SCORE: [number]" in prompt


def test_score_token_is_extracted_and_stripped():
    a = parse_response("The site looks fine.\n\nSAFETY_SCORE: 92")
    assert a.score == 92
    assert a.label == "Safe"
    assert a.explanation == "The site looks fine."
    assert a.available


def test_score_token_is_case_insensitive():
    a = parse_response("Be careful here.\nsafety_score:45")
    assert a.score == 45
    assert a.label == "Potentially Unsafe"
    assert "safety_score" not in a.explanation.lower()


def test_first_score_token_wins():
    a = parse_response("SAFETY_SCORE: 30\nlater: SAFETY_SCORE: 90")
    assert a.score == 30


def test_score_token_is_clamped():
    assert parse_response("SAFETY_SCORE: 150").score == 100


@pytest.mark.parametrize(
    "text, expected",
    [
        ("This is a classic phishing page.", 20),
        ("It looks legitimate but hosts malicious scripts.", 20),
        ("A SCAM, clearly.", 20),
        ("Proceed with caution.", 50),
        ("A legitimate site; still use caution.", 50),
        ("Suspicious, although it claims to be legitimate.", 50),
        ("This appears to be a legitimate retailer.", 85),
        ("Nothing notable about this address.", 65),
    ],
)
def test_fallback_score_precedence(text, expected):
    assert infer_score(text) == expected
    a = parse_response(text)
    assert a.score == expected
    assert a.explanation == text


# --- adapter ----------------------------------------------------------------


def test_assess_uses_canonical_url():
    provider = StaticProvider("Fine.\nSAFETY_SCORE: 88")
    a = asyncio.run(assess(normalize("example.com"), provider))
    assert a.score == 88
    assert a.label == "Safe"
    assert "https://example.com" in provider.prompts[0]


def test_assess_degrades_on_provider_failure():
    a = asyncio.run(assess(normalize("example.com"), FailingProvider()))
    assert a.score is None
    assert a.label is None
    assert a.explanation == UNAVAILABLE_MESSAGE
    assert not a.available


# --- gemini provider ----------------------------------------------------------


def test_gemini_provider_request_and_response():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_body("Looks legit.\nSAFETY_SCORE: 77"))

    provider = GeminiProvider(
        "secret-key",
        "gemini-test",
        endpoint="https://ai.example.invalid/v1beta/",
        transport=httpx.MockTransport(handler),
    )
    a = asyncio.run(assess(normalize("example.com"), provider))

    assert seen["url"] == "https://ai.example.invalid/v1beta/models/gemini-test:generateContent"
    assert seen["key"] == "secret-key"
    assert "https://example.com" in seen["body"]["contents"][0]["parts"][0]["text"]
    assert a.score == 77
    assert a.label == "Exercise Caution"
    assert a.explanation == "Looks legit."


def test_gemini_provider_auth_failure_degrades():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"message": "API key not valid"}})

    provider = GeminiProvider("bad-key", transport=httpx.MockTransport(handler))
    a = asyncio.run(assess(normalize("example.com"), provider))
    assert a.score is None
    assert a.explanation == UNAVAILABLE_MESSAGE


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": []},
        {"promptFeedback": {"blockReason": "SAFETY"}},
    ],
)
def test_gemini_provider_rejects_unusable_payloads(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    provider = GeminiProvider("k", transport=httpx.MockTransport(handler))
    with pytest.raises(AiAdapterError):
        asyncio.run(provider.complete("prompt"))


def test_gemini_provider_from_config():
    provider = GeminiProvider.from_config(
        "k", {"ai": {"model": "gemini-custom", "timeout": 5}}
    )
    assert provider.model_id == "gemini-custom"


def test_gemini_provider_empty_answer_gets_neutral_score():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_gemini_body("   "))

    provider = GeminiProvider("k", transport=httpx.MockTransport(handler))
    a = asyncio.run(assess(normalize("example.com"), provider))
    assert a.score == 65
    assert a.label == "Exercise Caution"
    assert a.explanation == ""
