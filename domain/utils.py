from __future__ import annotations

import re
import unicodedata
from typing import Sequence

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lower-case, strip diacritics and collapse whitespace."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped).strip()


def dedupe_doubled_text(text: str) -> str:
    """Collapse ``"Email addressEmail address"`` into ``"Email address"``.

    Sites often render a visible label followed by an identical copy for
    screen readers.
    """
    text = _WHITESPACE.sub(" ", text).strip()
    if len(text) < 4:
        return text
    half, rest = divmod(len(text), 2)
    if rest == 0 and text[:half] == text[half:]:
        return text[:half].strip()
    # "Email address Email address" has an odd length once whitespace is collapsed
    if rest == 1 and text[half] == " " and text[:half] == text[half + 1:]:
        return text[:half].strip()
    return text


def match_option(answer: str, options: Sequence[str]) -> str | None:
    """Pick the option that best corresponds to ``answer``.

    An exact normalized match always wins. Otherwise the closest partial
    match (one string contained in the other, highest length ratio) is
    returned.
    """
    target = normalize_text(answer)
    if not target:
        return None
    normalized = [(opt, normalize_text(opt)) for opt in options]
    for opt, norm in normalized:
        if norm == target:
            return opt

    best: str | None = None
    best_score = 0.0
    for opt, norm in normalized:
        if not norm:
            continue
        if norm in target or target in norm:
            score = min(len(norm), len(target)) / max(len(norm), len(target))
            if score > best_score:
                best, best_score = opt, score
    return best


def parse_number_list(raw: str, upper_bound: int) -> list[int]:
    """Parse ``"1, 3 and 4"`` into ``[1, 3, 4]`` keeping values in 1..upper_bound."""
    seen: list[int] = []
    for token in re.findall(r"\d+", raw):
        value = int(token)
        if 1 <= value <= upper_bound and value not in seen:
            seen.append(value)
    return seen


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]
