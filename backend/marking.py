"""Bulk marking of known terms inside a note.

Rewrites plain-text occurrences of known terms as `` `%term%` `` so the
render post-processor picks them up. This is a textual heuristic, not a
markdown parser.
"""

import re
from pathlib import PurePosixPath
from typing import Iterable, List, Optional, Pattern

from definitions import SENTINEL


MARK_OPEN = "`" + SENTINEL
MARK_CLOSE = SENTINEL + "`"

# A marker that any of these would rewrite, doubled or pushed inside
# wiki-link brackets, is left off and the term stays unmarked.
CLEANUP_REPLACEMENTS = (
    (MARK_OPEN + MARK_OPEN, MARK_OPEN),
    ("[[" + MARK_OPEN, "[["),
    (MARK_CLOSE + MARK_CLOSE, MARK_CLOSE),
    (MARK_CLOSE + "]]", "]]"),
)

_PROTECTED_RE = re.compile(
    r"^(```|~~~)[^\n]*\n.*?^\1[^\n]*$|`[^`\n]*`|\[\[[^\]\n]*\]\]",
    re.MULTILINE | re.DOTALL,
)
_MARKED_RE = re.compile(re.escape(MARK_OPEN) + r"(.*?)" + re.escape(MARK_CLOSE))


def _term_pattern(known_terms: Iterable[str]) -> Optional[Pattern[str]]:
    terms = sorted({t for t in known_terms if t and t.strip()}, key=len, reverse=True)
    if not terms:
        return None
    body = "|".join(re.escape(term) for term in terms)
    # Whole words only, never touching an existing sentinel or backtick; one
    # trailing "s" is accepted so plurals get marked too.
    return re.compile(rf"(?<![\w%`])(?:{body})s?(?![\w%`])", re.IGNORECASE)


def repair_markers(text: str) -> str:
    for old, new in CLEANUP_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def _wrap(text: str, start: int, end: int) -> str:
    """Marked form of ``text[start:end]``, or the bare term when the cleanup
    replacements would have to move its markers."""
    before = text[max(0, start - 2) : start]
    after = text[end : end + 2]
    marked = MARK_OPEN + text[start:end] + MARK_CLOSE
    window = before + marked + after
    if repair_markers(window) != window:
        return text[start:end]
    return marked


def _mark_region(text: str, pattern: Pattern[str], start: int, end: int, pieces: List[str]):
    position = start
    for match in pattern.finditer(text, start, end):
        pieces.append(text[position : match.start()])
        pieces.append(_wrap(text, match.start(), match.end()))
        position = match.end()
    pieces.append(text[position:end])


def mark_terms(text: str, known_terms: Iterable[str]) -> str:
    """Wrap every occurrence of a known term in marker inline code.

    Fenced code blocks, inline code spans and ``[[wiki links]]`` are left as
    they are. The matched text keeps its original case.
    """
    pattern = _term_pattern(known_terms)
    if pattern is None or not text:
        return text

    pieces: List[str] = []
    position = 0
    for protected in _PROTECTED_RE.finditer(text):
        _mark_region(text, pattern, position, protected.start(), pieces)
        pieces.append(protected.group(0))
        position = protected.end()
    _mark_region(text, pattern, position, len(text), pieces)

    return "".join(pieces)


def unmark_terms(text: str) -> str:
    """Remove marker wrapping, leaving the bare terms."""
    return _MARKED_RE.sub(lambda match: match.group(1), text or "")


def copy_path(note_id: str) -> str:
    """Path of the marked copy written next to the original note."""
    path = PurePosixPath(note_id)
    if path.suffix:
        return str(path.with_name(f"{path.stem}_copy{path.suffix}"))
    return f"{note_id}_copy"
