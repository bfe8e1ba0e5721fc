"""Definition extraction and term lookup.

A definitions note holds one glossary entry per line::

    cat, cats: a small domesticated feline
    **dog**: a domesticated canine

Everything before the first ``:`` is a comma separated alias group (markdown
emphasis and heading characters removed), everything after it is the
definition. Marked occurrences elsewhere in the vault (inline code such as
`` `%cats%` ``) are resolved back to a definition with a single trailing-"s"
singular/plural fallback.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from models import DefinitionMapping, NoteRecord, ScanResult


DELIMITER = ":"
ALIAS_SEPARATOR = ","
# "´" stands for the mis-decoded "Â´" pair; a lone "Â" is a real letter and is kept.
MARKUP_CHARS = "*_#´"
SENTINEL = "%"

_MARKUP_TABLE = str.maketrans("", "", MARKUP_CHARS)


def normalize_term(term: str) -> str:
    return (term or "").strip().lower()


def parse_definition_line(line: str) -> Optional[Tuple[List[str], str]]:
    """Split a definition line into its aliases and definition.

    Only the first delimiter separates the alias group from the definition;
    later delimiters belong to the definition, which is kept verbatim.
    Returns ``None`` when the line is not a definition line.
    """
    if DELIMITER not in line:
        return None

    alias_group, definition = line.split(DELIMITER, 1)
    aliases = []
    for alias in alias_group.translate(_MARKUP_TABLE).split(ALIAS_SEPARATOR):
        normalized = normalize_term(alias)
        if normalized:
            aliases.append(normalized)

    if not aliases:
        return None
    return aliases, definition


def extract_definitions(text: str) -> Tuple[DefinitionMapping, int]:
    """Parse every definition line of ``text``.

    Returns the mapping and the number of definition lines found (one per
    line, not per alias).
    """
    mapping: DefinitionMapping = {}
    count = 0
    for line in (text or "").split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        parsed = parse_definition_line(line)
        if parsed is None:
            continue
        aliases, definition = parsed
        for alias in aliases:
            mapping[alias] = definition
        count += 1
    return mapping, count


def _candidates(term: str) -> Tuple[str, str]:
    lowered = term.lower()
    singular = lowered[:-1] if lowered.endswith("s") else lowered
    return singular, singular + "s"


def resolve(raw_term: str, mapping: DefinitionMapping) -> Optional[str]:
    """Look up ``raw_term``, trying its singular form before its plural."""
    singular, plural = _candidates(raw_term)
    if singular in mapping:
        return mapping[singular]
    return mapping.get(plural)


def parse_marked_term(code_text: str) -> Optional[str]:
    """Return the term inside a `%term%` inline code span, if it is one."""
    text = (code_text or "").strip()
    if len(text) < 2 or not (text.startswith(SENTINEL) and text.endswith(SENTINEL)):
        return None
    return text[1:-1].strip()


class DefinitionEngine:
    """Holds the term -> definition mapping rebuilt by each scan."""

    def __init__(self, mapping: Optional[DefinitionMapping] = None):
        self._lock = threading.RLock()
        self._mapping: DefinitionMapping = {}
        for term, definition in (mapping or {}).items():
            key = normalize_term(term)
            if key:
                self._mapping[key] = definition

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def scan(
        self,
        documents: Iterable[NoteRecord],
        target_name: str,
        reader: Optional[Callable[[NoteRecord], str]] = None,
    ) -> ScanResult:
        """Rebuild the mapping from every document titled ``target_name``.

        A document that cannot be read is reported in ``ScanResult.errors``;
        the remaining documents still contribute. The new mapping replaces
        the previous one once all matching documents have been read.
        """
        with self._lock:
            result = ScanResult()
            for record in documents:
                if record.title != target_name:
                    continue
                try:
                    content = reader(record) if reader is not None else record.content
                except (OSError, UnicodeDecodeError) as exc:
                    print(f"Definition scan skipped {record.id}: {exc}")
                    result.errors[record.id] = str(exc)
                    continue

                mapping, count = extract_definitions(content)
                result.mapping.update(mapping)
                result.count += count
                result.documents.append(record.id)

            self._mapping = dict(result.mapping)
            return result

    def resolve(self, term: str) -> Optional[str]:
        # Reads the current mapping reference without waiting on a scan.
        return resolve(term, self._mapping)

    def terms(self) -> List[str]:
        return list(self._mapping.keys())

    def mapping(self) -> Dict[str, str]:
        return dict(self._mapping)

    def clear(self) -> None:
        with self._lock:
            self._mapping = {}

    def __len__(self) -> int:
        return len(self._mapping)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and normalize_term(term) in self._mapping
