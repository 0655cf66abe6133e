# secureguard/config.py
"""
Centralized configuration management.

Handles loading defaults and merging in settings from the
`[tool.secureguard]` table of pyproject.toml.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, MutableMapping

import tomli

log = logging.getLogger(__name__)

# Top-level domains that are cheap to register and common in throwaway
# phishing campaigns. Compared against the last label of the host.
DEFAULT_SUSPICIOUS_TLDS = [
    "xyz",
    "tk",
    "ml",
    "ga",
    "cf",
    "gq",
    "top",
    "work",
    "date",
    "racing",
]

# Matched as substrings of the host.
DEFAULT_SHORTENERS = [
    "bit.ly",
    "tinyurl.com",
    "goo.gl",
    "t.co",
    "ow.ly",
    "is.gd",
    "buff.ly",
    "adf.ly",
    "tiny.cc",
]

# Matched as substrings of the lower-cased canonical URL.
DEFAULT_SUSPICIOUS_TERMS = [
    "login",
    "signin",
    "verify",
    "secure",
    "account",
    "update",
    "confirm",
    "paypal",
    "banking",
    "password",
]

# Matched as suffixes of the host.
DEFAULT_KNOWN_DOMAINS = [
    "google.com",
    "youtube.com",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "linkedin.com",
    "github.com",
    "apple.com",
    "microsoft.com",
    "amazon.com",
]

# This is the baseline configuration dictionary.
DEFAULT_CONFIG: dict[str, Any] = {
    "suspicious_tlds": DEFAULT_SUSPICIOUS_TLDS,
    "shorteners": DEFAULT_SHORTENERS,
    "suspicious_terms": DEFAULT_SUSPICIOUS_TERMS,
    "known_domains": DEFAULT_KNOWN_DOMAINS,
    "ai": {
        "model": "gemini-1.5-pro",
        "endpoint": "https://generativelanguage.googleapis.com/v1beta",
        "timeout": 30.0,
    },
    "store": {
        # Either a concrete directory path, or "os-default" for the
        # platform's per-user data directory.
        "directory": "os-default",
    },
}


def _deep_merge_dict(
    base: MutableMapping[str, Any], overrides: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Recursively merge dicts."""
    for key, value in overrides.items():
        if isinstance(value, MutableMapping) and isinstance(
            base.get(key), MutableMapping
        ):
            base[key] = _deep_merge_dict(base[key], value)
        else:
            base[key] = value
    return base


def load_config(pyproject_path: Path | None = None) -> dict[str, Any]:
    """
    Loads configuration from defaults and merges settings from pyproject.toml.

    1. Starts with a deep copy of DEFAULT_CONFIG.
    2. Looks for `pyproject.toml` (default: current working directory).
    3. If found, merges settings from `[tool.secureguard]` over the defaults.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if pyproject_path is None:
        pyproject_path = Path.cwd() / "pyproject.toml"

    if not pyproject_path.exists():
        log.debug(
            "No pyproject.toml found at %s. Using default config.", pyproject_path
        )
        return config

    try:
        with pyproject_path.open("rb") as f:
            toml_data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        log.warning(
            "Failed to load or parse %s: %s. Using default config.",
            pyproject_path,
            e,
            exc_info=True,
        )
        return config

    project_config = toml_data.get("tool", {}).get("secureguard", {})
    if project_config:
        log.info("Loading config from %s", pyproject_path)
        config = _deep_merge_dict(config, project_config)  # type: ignore
    else:
        log.debug("No [tool.secureguard] section in %s.", pyproject_path)

    return config
