import pytest

from secureguard.heuristics import (
    DEFAULT_POSITIVE,
    HTTP_WARNING,
    HTTPS_POSITIVE,
    KNOWN_DOMAIN_POSITIVE,
    RAW_IP_WARNING,
    SHORTENER_WARNING,
    SUBDOMAINS_WARNING,
    SUSPICIOUS_TERMS_PREFIX,
    UNUSUAL_CHARACTERS_WARNING,
    RuleSet,
    is_known_domain,
    score_url,
)
from secureguard.normalize import normalize

# --- helpers ---------------------------------------------------------------


def _score(url: str, rules: RuleSet | None = None):
    if rules is None:
        return score_url(normalize(url))
    return score_url(normalize(url), rules)


def _has_terms_warning(report) -> bool:
    return any(w.startswith(SUSPICIOUS_TERMS_PREFIX) for w in report.warnings)


# --- tests ----------------------------------------------------------------


def test_clean_https_url_scores_full():
    r = _score("https://example.com")
    assert r.score == 100
    assert r.warnings == ()
    assert r.positives == (HTTPS_POSITIVE,)


def test_raw_ip_over_http():
    r = _score("http://192.168.1.1")
    assert r.score == 60
    assert r.warnings == (HTTP_WARNING, RAW_IP_WARNING)
    # no rule produced a positive and 60 > 50
    assert r.positives == (DEFAULT_POSITIVE,)


def test_known_domain_removes_suspicious_terms_warning():
    r = _score("https://accounts.google.com/login")
    assert not _has_terms_warning(r)
    assert KNOWN_DOMAIN_POSITIVE in r.positives
    assert r.score == 100
    assert is_known_domain(r)


def test_known_domain_bonus_and_refund_both_apply():
    # Same URL scored with and without the host on the allow-list:
    # the difference is the +30 bonus plus the refunded 5-point term penalty.
    url = "http://a.b.c.login.example.tk"
    plain = _score(url, RuleSet(known_domains=()))
    trusted = _score(url, RuleSet(known_domains=("example.tk",)))

    assert plain.score == 60  # -10 http, -15 tld, -10 subdomains, -5 login
    assert _has_terms_warning(plain)

    assert trusted.score == 95
    assert trusted.warnings == (
        HTTP_WARNING,
        "Domain uses potentially suspicious TLD (.tk)",
        SUBDOMAINS_WARNING,
    )
    assert trusted.positives == (KNOWN_DOMAIN_POSITIVE,)


def test_shortener():
    r = _score("https://bit.ly/3abcDEF")
    assert r.score == 75
    assert r.warnings == (SHORTENER_WARNING,)


def test_shortener_substring_on_known_domain_clamps_to_100():
    # "microsoft.com" contains "t.co": -25 for the shortener, +30 as a known domain.
    r = _score("https://microsoft.com")
    assert r.warnings == (SHORTENER_WARNING,)
    assert r.positives == (HTTPS_POSITIVE, KNOWN_DOMAIN_POSITIVE)
    assert r.score == 100


def test_suspicious_tld():
    r = _score("https://free-prizes.xyz")
    assert r.score == 85
    assert r.warnings == ("Domain uses potentially suspicious TLD (.xyz)",)


def test_internationalized_host_is_scored_in_punycode():
    r = _score("https://exämple.com")
    assert UNUSUAL_CHARACTERS_WARNING not in r.warnings
    assert r.score == 100
    assert r.positives == (HTTPS_POSITIVE,)


def test_suspicious_terms_listed_in_rule_order():
    r = _score("http://paypal-secure-login.verify-account.tk/update/password")
    assert r.score == 40  # -10 http, -15 tld, -35 for seven terms
    assert r.warnings[-1] == (
        SUSPICIOUS_TERMS_PREFIX
        + "login, verify, secure, account, update, paypal, password"
    )
    assert r.positives == ()


@pytest.mark.parametrize(
    "url, expect_warning, expected_score",
    [
        ("https://a.b.c.example.com", False, 100),  # 3 subdomains: allowed
        ("https://a.b.c.d.example.com", True, 90),  # 4 subdomains
    ],
)
def test_subdomain_threshold(url, expect_warning, expected_score):
    r = _score(url)
    assert (SUBDOMAINS_WARNING in r.warnings) is expect_warning
    assert r.score == expected_score


def test_unusual_characters_in_host():
    r = _score("https://exa_mple.com")
    assert r.warnings == (UNUSUAL_CHARACTERS_WARNING,)
    assert r.score == 85


def test_score_clamps_at_zero():
    url = (
        "http://bit.ly.signin.login.verify.secure.account.update"
        ".confirm.paypal.banking.password.tk"
    )
    r = _score(url)
    assert r.score == 0
    assert r.positives == ()


@pytest.mark.parametrize(
    "url, expected_score, expect_default",
    [
        ("http://10.0.0.1/login", 55, True),
        ("http://10.0.0.1/login/verify", 50, False),  # exactly 50: no fallback
    ],
)
def test_default_positive_only_above_fifty(url, expected_score, expect_default):
    r = _score(url)
    assert r.score == expected_score
    assert (DEFAULT_POSITIVE in r.positives) is expect_default


@pytest.mark.parametrize(
    "url",
    [
        "example.com",
        "http://192.168.1.1",
        "https://accounts.google.com/login",
        "http://bit.ly.login.verify.secure.account.update.tk",
        "https://xn--pple-43d.com",
        "https://very.deep.sub.domain.chain.of.labels.example.xyz/login",
        "https://google.com.evil.example.ml/verify?account=1",
        "https://tinyurl.com/banking-password-update",
    ],
)
def test_score_always_in_range(url):
    assert 0 <= _score(url).score <= 100


def test_ruleset_from_config_normalizes_entries():
    rules = RuleSet.from_config(
        {"suspicious_tlds": [".XYZ", " top "], "known_domains": ["Example.ORG"]}
    )
    assert rules.suspicious_tlds == ("xyz", "top")
    assert rules.known_domains == ("example.org",)
    # untouched lists fall back to the defaults
    assert "bit.ly" in rules.shorteners


def test_injected_rules_replace_defaults():
    rules = RuleSet(suspicious_tlds=("com",))
    r = _score("https://example.com", rules)
    assert r.warnings == ("Domain uses potentially suspicious TLD (.com)",)
    assert r.score == 85
