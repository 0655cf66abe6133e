# secureguard/heuristics.py
"""
Deterministic, rule-based URL scoring.

Every URL starts at 100. Each rule below adds a fixed delta and records a
warning or a positive finding. Deltas are plain additions, so rule order only
affects the order of the findings, not the final number.

    Transport            non-https                     -10
    Suspicious TLD       last host label in list       -15
    Shortener            host contains shortener       -25
    Excessive subdomains labels - 2 > 3                -10
    Raw IP host          dotted-quad host              -30
    Suspicious terms     keyword in canonical URL      -5 per distinct term
    Unusual characters   host outside [A-Za-z0-9.-]    -15
    Known domain         host ends with allow-listed   +30 and refunds the
                                                       suspicious-terms penalty
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from secureguard.config import (
    DEFAULT_KNOWN_DOMAINS,
    DEFAULT_SHORTENERS,
    DEFAULT_SUSPICIOUS_TERMS,
    DEFAULT_SUSPICIOUS_TLDS,
)
from secureguard.models import CAUTION_THRESHOLD, NormalizedUrl, ScoreReport

log = logging.getLogger(__name__)

BASE_SCORE = 100

INSECURE_TRANSPORT_PENALTY = 10
SUSPICIOUS_TLD_PENALTY = 15
SHORTENER_PENALTY = 25
EXCESSIVE_SUBDOMAINS_PENALTY = 10
RAW_IP_PENALTY = 30
SUSPICIOUS_TERM_PENALTY = 5  # per distinct term
UNUSUAL_CHARACTERS_PENALTY = 15
KNOWN_DOMAIN_BONUS = 30

MAX_SUBDOMAINS = 3

SECURE_SCHEME = "https"

IPV4_HOST_RE = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$")
UNUSUAL_HOST_CHARS_RE = re.compile(r"[^A-Za-z0-9.\-]")

# Finding texts. The known-domain positive is also how the blender recognises a
# trusted host, see `is_known_domain`.
HTTPS_POSITIVE = "Uses secure HTTPS connection"
HTTP_WARNING = "Website does not use HTTPS (secure connection)"
SHORTENER_WARNING = (
    "URL appears to be a shortened link, which can hide the actual destination"
)
SUBDOMAINS_WARNING = "URL contains an unusual number of subdomains"
RAW_IP_WARNING = "URL uses an IP address instead of a domain name"
SUSPICIOUS_TERMS_PREFIX = "URL contains potentially suspicious terms: "
UNUSUAL_CHARACTERS_WARNING = "Domain contains unusual special characters"
KNOWN_DOMAIN_POSITIVE = "Domain matches a common legitimate website"
DEFAULT_POSITIVE = "No major security issues detected"


def _lowered(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(v.strip().lower() for v in values if v and v.strip())


@dataclass(frozen=True)
class RuleSet:
    """The lists the rules compare against. Values are lower-case."""

    suspicious_tlds: tuple[str, ...] = tuple(DEFAULT_SUSPICIOUS_TLDS)
    shorteners: tuple[str, ...] = tuple(DEFAULT_SHORTENERS)
    suspicious_terms: tuple[str, ...] = tuple(DEFAULT_SUSPICIOUS_TERMS)
    known_domains: tuple[str, ...] = tuple(DEFAULT_KNOWN_DOMAINS)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "RuleSet":
        # TLDs may be written either as "xyz" or ".xyz".
        tlds = tuple(t.lstrip(".") for t in _lowered(config.get("suspicious_tlds", DEFAULT_SUSPICIOUS_TLDS)))
        return cls(
            suspicious_tlds=tlds,
            shorteners=_lowered(config.get("shorteners", DEFAULT_SHORTENERS)),
            suspicious_terms=_lowered(config.get("suspicious_terms", DEFAULT_SUSPICIOUS_TERMS)),
            known_domains=_lowered(config.get("known_domains", DEFAULT_KNOWN_DOMAINS)),
        )


DEFAULT_RULES = RuleSet()


def _matched_terms(canonical: str, terms: Iterable[str]) -> list[str]:
    """Distinct terms found in the lower-cased URL, in list order."""
    haystack = canonical.lower()
    found: list[str] = []
    for term in terms:
        if term in haystack and term not in found:
            found.append(term)
    return found


def score_url(url: NormalizedUrl, rules: RuleSet = DEFAULT_RULES) -> ScoreReport:
    """Apply every rule to `url` and return the clamped score with findings."""
    score = BASE_SCORE
    warnings: list[str] = []
    positives: list[str] = []
    host = url.host
    host_lower = host.lower()

    # Transport
    if url.scheme != SECURE_SCHEME:
        score -= INSECURE_TRANSPORT_PENALTY
        warnings.append(HTTP_WARNING)
    else:
        positives.append(HTTPS_POSITIVE)

    # Suspicious TLD
    tld = host_lower.split(".")[-1]
    if tld in rules.suspicious_tlds:
        score -= SUSPICIOUS_TLD_PENALTY
        warnings.append(f"Domain uses potentially suspicious TLD (.{tld})")

    # Shortener
    if any(s in host_lower for s in rules.shorteners):
        score -= SHORTENER_PENALTY
        warnings.append(SHORTENER_WARNING)

    # Excessive subdomains
    if len(host.split(".")) - 2 > MAX_SUBDOMAINS:
        score -= EXCESSIVE_SUBDOMAINS_PENALTY
        warnings.append(SUBDOMAINS_WARNING)

    # Raw IP host
    if IPV4_HOST_RE.match(host):
        score -= RAW_IP_PENALTY
        warnings.append(RAW_IP_WARNING)

    # Suspicious terms
    terms = _matched_terms(url.canonical, rules.suspicious_terms)
    terms_penalty = SUSPICIOUS_TERM_PENALTY * len(terms)
    terms_warning: str | None = None
    if terms:
        score -= terms_penalty
        terms_warning = SUSPICIOUS_TERMS_PREFIX + ", ".join(terms)
        warnings.append(terms_warning)

    # Unusual characters
    if UNUSUAL_HOST_CHARS_RE.search(host):
        score -= UNUSUAL_CHARACTERS_PENALTY
        warnings.append(UNUSUAL_CHARACTERS_WARNING)

    # Known-legitimate domain
    if any(host_lower.endswith(d) for d in rules.known_domains):
        score += KNOWN_DOMAIN_BONUS
        positives.append(KNOWN_DOMAIN_POSITIVE)
        if terms_warning is not None:
            warnings.remove(terms_warning)
            score += terms_penalty

    score = max(0, min(100, score))

    if not positives and score > CAUTION_THRESHOLD:
        positives.append(DEFAULT_POSITIVE)

    log.debug(
        "Heuristic score for %s: %d (%d warnings, %d positives)",
        url.canonical,
        score,
        len(warnings),
        len(positives),
    )
    return ScoreReport(score=score, warnings=tuple(warnings), positives=tuple(positives))


def is_known_domain(report: ScoreReport) -> bool:
    """True when the known-legitimate-domain rule fired for this report."""
    return KNOWN_DOMAIN_POSITIVE in report.positives
