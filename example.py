# example.py
# A small example demonstrating how to use the secureguard library to
# score a handful of URLs and print the findings.

import asyncio
import logging
import os

from secureguard import check_url
from secureguard.normalize import is_valid_url

# --- Configuration ---
# You can enable logging to see each step of a check.
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

# A mix of ordinary, shortened and suspicious-looking addresses.
TARGET_URLS = [
    "github.com",
    "https://accounts.google.com/login",
    "bit.ly/3xYz",
    "http://192.168.1.1/verify-account",
    "paypal-secure-login.example.tk",
    "not a url",
]


async def main():
    """
    Check each URL and print the results.
    """
    # Set GEMINI_API_KEY in the environment to blend in the AI assessment.
    if not os.environ.get("GEMINI_API_KEY"):
        print("[*] GEMINI_API_KEY not set: heuristic scores only.\n")

    for url in TARGET_URLS:
        if not is_valid_url(url):
            print(f"\n[*] Skipping unusable input: {url!r}")
            continue

        # This is the primary API call. It handles everything:
        # - Normalizing and validating the input.
        # - Running the heuristic rules.
        # - Asking the AI provider when a key is available, and blending scores.
        # - Recording the check in the local history.
        outcome = await check_url(url)

        print(f"\n--- {url} ---")
        if outcome.error:
            print(f"Invalid input: {outcome.error}")
            continue

        result = outcome.result
        print(f"Score: {result.score}/100 ({result.safety_level})")
        for warning in result.warnings:
            print(f"  ! {warning}")
        for positive in result.positives:
            print(f"  + {positive}")
        if result.ai is not None:
            print(f"  AI: {result.ai.label or 'unavailable'}")
        for notice in outcome.notices:
            print(f"  note: {notice}")


if __name__ == "__main__":
    asyncio.run(main())
