# secureguard/api.py
# The primary, programmer-facing API for the library.

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Callable

from secureguard.ai import AssessmentProvider, GeminiProvider, assess
from secureguard.config import load_config
from secureguard.errors import (
    CheckInProgressError,
    EmptyInputError,
    InvalidUrlError,
    PersistenceError,
)
from secureguard.heuristics import RuleSet, is_known_domain, score_url
from secureguard.history import HistoryStore, now_ms
from secureguard.models import AiAssessment, CheckOutcome, FinalResult, HistoryRecord
from secureguard.normalize import normalize
from secureguard.scoring import blend, safety_level
from secureguard.storage import KeyValueStore, StoreConfig, get_api_key

log = logging.getLogger(__name__)

API_KEY_ENV_VAR = "GEMINI_API_KEY"

ProviderFactory = Callable[[str], AssessmentProvider]


def resolve_api_key(explicit: str | None, store: KeyValueStore | None) -> str | None:
    """Explicit argument, then the stored credential, then GEMINI_API_KEY."""
    if explicit:
        return explicit
    if store is not None:
        try:
            stored = get_api_key(store)
        except PersistenceError as e:
            log.warning("Could not read stored API key: %s", e)
            stored = None
        if stored:
            return stored
    return os.environ.get(API_KEY_ENV_VAR) or None


class UrlChecker:
    """
    Runs checks one at a time.

    The checker holds no state between checks apart from the history store.
    Starting a check while another is still awaiting its AI assessment raises
    CheckInProgressError; callers are expected to wait for the first one.
    """

    def __init__(
        self,
        *,
        rules: RuleSet | None = None,
        history: HistoryStore | None = None,
        provider_factory: ProviderFactory | None = None,
        config: dict[str, Any] | None = None,
    ):
        self.config = config if config is not None else load_config()
        self.rules = rules or RuleSet.from_config(self.config)
        self.history = history
        self.provider_factory = provider_factory or (
            lambda key: GeminiProvider.from_config(key, self.config)
        )
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def check(self, raw_url: str, api_key: str | None = None) -> CheckOutcome:
        """
        Score `raw_url`, blend in an AI assessment when `api_key` is given and
        record the result in the history.

        Validation problems come back as `CheckOutcome.error`; a failed
        history save comes back as a notice next to a valid result.
        """
        if self.busy:
            raise CheckInProgressError("A check is already running")

        async with self._lock:
            log.info("Starting check for: %s", raw_url)
            try:
                url = normalize(raw_url)
            except (EmptyInputError, InvalidUrlError) as e:
                log.info("Rejected input %r: %s", raw_url, e)
                return CheckOutcome(url=raw_url, error=str(e))

            # Step 1: rules
            report = score_url(url, self.rules)
            log.info("Heuristic score: %d", report.score)

            # Step 2: AI, only with a credential
            ai: AiAssessment | None = None
            if api_key:
                provider = self.provider_factory(api_key)
                ai = await assess(url, provider)
            else:
                log.debug("No API key; skipping AI assessment.")

            # Step 3: blend
            final_score = blend(report, ai, is_known_domain(report))
            result = FinalResult(
                url=raw_url,
                canonical_url=url.canonical,
                score=final_score,
                heuristic_score=report.score,
                warnings=report.warnings,
                positives=report.positives,
                ai=ai,
                checked_at=now_ms(),
                safety_level=safety_level(final_score),
            )
            log.info("Final score: %d (%s)", result.score, result.safety_level)

            outcome = CheckOutcome(url=raw_url, result=result)

            # Step 4: history
            if self.history is not None:
                try:
                    self.history.append(
                        HistoryRecord(url=raw_url, score=result.score, timestamp=result.checked_at)
                    )
                except PersistenceError as e:
                    log.warning("Could not save check to history: %s", e)
                    outcome.notices.append(f"Result not saved to history: {e}")

            return outcome


async def check_url(
    raw_url: str,
    *,
    api_key: str | None = None,
    use_ai: bool = True,
    store_dir: str | None = None,
    pyproject_path: Path | None = None,
    provider_factory: ProviderFactory | None = None,
) -> CheckOutcome:
    """
    The main API function: check one URL with the default configuration.

    Args:
        raw_url: The URL as typed by the user.
        api_key: AI credential; falls back to the stored key, then GEMINI_API_KEY.
        use_ai: Set False to skip the AI assessment even when a key exists.
        store_dir: Override the history/credential store directory.
        pyproject_path: Read `[tool.secureguard]` from this file.
        provider_factory: Build the AI provider from a credential (tests).

    Returns:
        A CheckOutcome holding the FinalResult or a validation message.
    """
    config = load_config(pyproject_path)
    with KeyValueStore(StoreConfig.from_config(config, store_dir)) as store:
        key = resolve_api_key(api_key, store) if use_ai else None
        checker = UrlChecker(
            history=HistoryStore(store),
            provider_factory=provider_factory,
            config=config,
        )
        return await checker.check(raw_url, api_key=key)
