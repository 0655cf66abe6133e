# secureguard/ui.py
# Presentation-only utilities for CLI output.
from __future__ import annotations

from datetime import datetime
from typing import IO, Iterable

from secureguard.models import FinalResult, HistoryRecord
from secureguard.scoring import safety_level


def _writeln(text: str = "", *, file: IO[str]) -> None:
    file.write(text + "\n")


def render_check_header(url: str, *, file: IO[str]) -> None:
    _writeln(f"Checking: {url}...", file=file)


def render_validation_error(message: str, *, file: IO[str]) -> None:
    _writeln(f"Error: {message}", file=file)


def render_score_line(result: FinalResult, *, file: IO[str]) -> None:
    _writeln(f"\nSafety score: {result.score}/100 ({result.safety_level})", file=file)
    if result.score != result.heuristic_score:
        _writeln(f"  heuristic score: {result.heuristic_score}/100", file=file)


def render_findings(result: FinalResult, *, file: IO[str]) -> None:
    if result.warnings:
        _writeln("\n--- Warnings ---", file=file)
        for w in result.warnings:
            _writeln(f"! {w}", file=file)
    if result.positives:
        _writeln("\n--- Positive Indicators ---", file=file)
        for p in result.positives:
            _writeln(f"+ {p}", file=file)


def render_ai_section(result: FinalResult, *, file: IO[str]) -> None:
    ai = result.ai
    if ai is None:
        return
    _writeln("\n--- AI Analysis ---", file=file)
    if ai.available:
        _writeln(f"AI safety score: {ai.score}/100 ({ai.label})", file=file)
    _writeln(ai.explanation, file=file)


def render_notices(notices: Iterable[str], *, file: IO[str]) -> None:
    items = list(notices)
    if not items:
        return
    _writeln("\n--- Notices ---", file=file)
    for n in items:
        _writeln(f"- {n}", file=file)


def _date_of(record: HistoryRecord) -> str:
    return datetime.fromtimestamp(record.timestamp / 1000).strftime("%Y-%m-%d")


def render_history(
    entries: Iterable[tuple[int, HistoryRecord]], *, file: IO[str]
) -> None:
    """
    Print (position, record) pairs grouped by calendar day, newest day first.
    The position is what `history recheck` expects.
    """
    items = list(entries)
    if not items:
        _writeln("No history entries.", file=file)
        return

    groups: dict[str, list[tuple[int, HistoryRecord]]] = {}
    for index, record in items:
        groups.setdefault(_date_of(record), []).append((index, record))

    for day in sorted(groups, reverse=True):
        _writeln(f"\n{day}", file=file)
        for index, record in groups[day]:
            when = datetime.fromtimestamp(record.timestamp / 1000).strftime("%H:%M")
            level = safety_level(record.score)
            _writeln(f"  [{index}] {when}  {record.score:>3} {level:<17} {record.url}", file=file)
