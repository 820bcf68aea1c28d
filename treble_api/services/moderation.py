"""
Treble API — Moderation Filter
===============================

What:  Loads the blocked-term list and checks user text against it.
Why:   Uploaded names, authors, descriptions and URLs are shown publicly.
How:   Every term becomes a precompiled whole-word matcher. Text is checked
       twice: lowercased as-is, and lowercased with common punctuation
       removed, so "b.a.d" is caught when "bad" is blocked.
When:  The list is read once by create_app(); the filter is then read-only
       and safe to share between concurrent requests.

Matching rules:
    - Terms are trimmed and lowercased; blank lines are skipped.
    - A term matches only as a whole word (\\b on both sides), so a blocked
      "ass" does not flag "class".
    - A term that itself contains punctuation can only match the unstripped
      variant, since stripping removes that punctuation from the text.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from treble_api.exceptions import WordListError

logger = logging.getLogger(__name__)

# Characters removed from the text before the second matching pass
STRIPPED_PUNCTUATION = ".,/#!$%^&*;:{}=-_`~()"

_STRIP_TABLE = str.maketrans("", "", STRIPPED_PUNCTUATION)
_WHITESPACE_RUN = re.compile(r"\s+")


def load_blocked_terms(path: str) -> List[str]:
    """
    Read a newline-delimited word list, dropping blank lines.

    Raises:
        WordListError: the file is missing or unreadable. There is no
        fallback list; the caller is expected to abort startup.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise WordListError(path=path, reason=str(e)) from e

    terms = [line for line in raw.splitlines() if line.strip()]
    logger.info("Loaded %d blocked terms from %s", len(terms), path)
    return terms


def strip_punctuation(lowered: str) -> str:
    """Remove STRIPPED_PUNCTUATION, collapse whitespace runs, trim the ends."""
    without = lowered.translate(_STRIP_TABLE)
    return _WHITESPACE_RUN.sub(" ", without).strip()


class ModerationFilter:
    """
    Whole-word, case-insensitive blocked-term matcher.

    Usage:
        moderation = ModerationFilter.from_file(settings.blocked_terms_path)
        if moderation.contains_blocked_term(text):
            ...
    """

    def __init__(self, terms: Iterable[str]):
        self._matchers: List[Tuple[str, re.Pattern[str]]] = []
        for term in terms:
            normalized = term.strip().lower()
            if not normalized:
                continue
            self._matchers.append(
                (normalized, re.compile(rf"\b{re.escape(normalized)}\b", re.IGNORECASE))
            )

    @classmethod
    def from_file(cls, path: str) -> "ModerationFilter":
        return cls(load_blocked_terms(path))

    def __len__(self) -> int:
        return len(self._matchers)

    def first_blocked_term(self, text: Optional[str]) -> Optional[str]:
        """Return the first blocked term found in `text`, or None."""
        if not text:
            return None

        lowered = text.lower()
        stripped = strip_punctuation(lowered)

        for term, matcher in self._matchers:
            if matcher.search(lowered) or matcher.search(stripped):
                return term
        return None

    def contains_blocked_term(self, text: Optional[str]) -> bool:
        return self.first_blocked_term(text) is not None
