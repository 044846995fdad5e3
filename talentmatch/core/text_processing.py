from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, Optional

# NOTE: This module is intentionally "core infrastructure".
# The resume parser, scorers and insight heuristics all depend on it rather
# than re-implementing normalization or skill-name comparison.

# Separators inside a skills line: commas, pipes, semicolons, bullet glyphs.
_LIST_SPLIT_RE = re.compile(r"[,|;•·▪●◦‣⁃■∙]")

# Leading bullet markers: "-", "*", "+", ">", "•", "▪", "1.", "2)"
_BULLET_PREFIX_RE = re.compile(r"^\s*(?:[-*+>•·▪●◦‣⁃■∙]+|\d{1,2}[.)])\s*")


def normalize_text(text: str) -> str:
    """
    Deterministic normalization for downstream parsing.

    Goals:
    - stable across platforms
    - remove unicode quirks (smart quotes, non-breaking spaces)
    - collapse whitespace
    """
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text)
    t = t.replace("\u00a0", " ")
    # Normalize common unicode dashes to '-'
    t = re.sub(r"[‐-―−]", "-", t)
    t = " ".join(t.split())
    return t


def normalize_whitespace(text: Optional[str]) -> str:
    return " ".join((text or "").split()).strip()


def strip_bullet(line: str) -> str:
    return _BULLET_PREFIX_RE.sub("", line or "", count=1).strip()


def split_list_items(line: str) -> List[str]:
    """Split a skills-style line into trimmed items (bullets stripped, empties dropped)."""
    out: List[str] = []
    for part in _LIST_SPLIT_RE.split(line or ""):
        item = normalize_whitespace(strip_bullet(part))
        if item:
            out.append(item)
    return out


def dedupe_first_seen(items: Iterable[str], *, case_insensitive: bool = False) -> List[str]:
    seen = set()
    out: List[str] = []
    for it in items:
        if not it:
            continue
        key = it.lower() if case_insensitive else it
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out


def names_overlap(a: str, b: str) -> bool:
    """
    Case-insensitive containment in either direction.
    Empty names never overlap (an empty string is a substring of everything).
    """
    la = (a or "").strip().lower()
    lb = (b or "").strip().lower()
    if not la or not lb:
        return False
    return la in lb or lb in la


def truncate(text: str, limit: int) -> str:
    text = text or ""
    return text if len(text) <= limit else text[:limit]
