"""
Resolve recognized inventory text against the item catalog.

Two recognizers live here:

- `CatalogMatcher.match` is the fuzzy, catalog-driven path. It is the
  authoritative one: every item it returns carries a canonical catalog name.
- `CatalogMatcher.parse_strict` is a literal "Name x12" / "Name 12" reader
  with no catalog lookup. It is only consulted for lines the fuzzy path
  rejected, and whatever it yields is triaged as an unknown item unless the
  name happens to exist in the catalog verbatim.
"""

from __future__ import annotations

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .catalog import Catalog, CatalogEntry
from .edit_distance import similarity
from .types import ResolvedItem

log = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.55
MIN_LINE_LENGTH = 3
DEFAULT_QUANTITY = 1

# Characters OCR produces in front of a stack count ("x40", "×40", "(40", "K40")
_TRAILING_QTY = re.compile(r"(\d+)\s*$")
_SEPARATOR_QTY = re.compile(r"[xX×:\[(<K]\s*(\d+)")

_STRICT_SEPARATED = re.compile(r"^(.+?)\s*(?:(?<![A-Za-z])[xXK]|[×«:(\[<])\s*(\d+)\s*$")
_STRICT_BARE = re.compile(r"^(.+?)\s+(\d+)\s*$")
_STRICT_DENYLIST = (
    re.compile(r"^\d+\s*/\s*\d+"),  # weight counter, e.g. "486/500"
    re.compile(r"^[0-9\W]+$"),  # digits and symbols only
    re.compile(r"^[A-Z]{1,2}\s+\d+"),  # short caps artifacts, e.g. "A 486", "EB 12"
)
_LEADING_INDEX = re.compile(r"^\d+\s+")
_TRADEMARK_GLYPHS = re.compile(r"[®©™]")
_NAME_TRAILER = re.compile(r"[:\-]+$")


class DuplicatePolicy(str, Enum):
    """What to do when several lines resolve to the same item."""

    SEPARATE = "separate"
    SUM = "sum"


@dataclass(frozen=True)
class LineMatch:
    """Outcome of fuzzy matching one text line."""

    line: str
    entry: Optional[CatalogEntry]
    score: float
    quantity: int

    @property
    def matched(self) -> bool:
        return self.entry is not None


def extract_quantity(line: str) -> int:
    """
    Stack count from a recognized line.

    Prefers a trailing digit run, then digits after a separator glyph;
    anything else counts as a single item.
    """
    match = _TRAILING_QTY.search(line) or _SEPARATOR_QTY.search(line)
    if not match:
        return DEFAULT_QUANTITY
    try:
        return int(match.group(1))
    except ValueError:
        return DEFAULT_QUANTITY


def merge_duplicates(
    items: Iterable[ResolvedItem],
    policy: DuplicatePolicy = DuplicatePolicy.SEPARATE,
) -> List[ResolvedItem]:
    """
    Apply the duplicate policy.

    SEPARATE returns the items unchanged; SUM folds same-name items into one
    record (first-seen order) whose quantity is the total.
    """
    items = list(items)
    if DuplicatePolicy(policy) is DuplicatePolicy.SEPARATE:
        return items

    totals: "OrderedDict[str, int]" = OrderedDict()
    for item in items:
        totals[item.name] = totals.get(item.name, 0) + item.quantity
    return [ResolvedItem(name, quantity) for name, quantity in totals.items()]


class CatalogMatcher:
    """Fuzzy line-by-line item resolver."""

    def __init__(
        self,
        threshold: float = MATCH_THRESHOLD,
        min_line_length: int = MIN_LINE_LENGTH,
    ):
        """
        Args:
            threshold: A line is accepted when its best score exceeds this
            min_line_length: Trimmed lines shorter than this are ignored
        """
        self.threshold = threshold
        self.min_line_length = min_line_length

    def _lines(self, text: str) -> List[str]:
        lines = []
        for raw in (text or "").splitlines():
            line = raw.strip()
            if len(line) >= self.min_line_length:
                lines.append(line)
        return lines

    @staticmethod
    def _prepare(catalog: Catalog) -> List[Tuple[CatalogEntry, str, int]]:
        prepared = []
        for entry in catalog.values():
            lowered = entry.name.lower()
            prepared.append((entry, lowered, len(lowered.split())))
        return prepared

    @staticmethod
    def _best(
        line: str, prepared: Sequence[Tuple[CatalogEntry, str, int]]
    ) -> Tuple[Optional[CatalogEntry], float]:
        words = line.lower().split()
        best_entry: Optional[CatalogEntry] = None
        best_score = 0.0
        for entry, lowered, window in prepared:
            if window == 0 or len(words) < window:
                continue
            for start in range(len(words) - window + 1):
                phrase = " ".join(words[start : start + window])
                score = similarity(lowered, phrase)
                if score > best_score:
                    best_entry, best_score = entry, score
        return best_entry, best_score

    def best_match(self, line: str, catalog: Catalog) -> Tuple[Optional[CatalogEntry], float]:
        """Highest-scoring (entry, score) for one line across the whole catalog."""
        return self._best(line.strip(), self._prepare(catalog))

    def match_lines(self, text: str, catalog: Catalog) -> List[LineMatch]:
        """Per-line diagnostics: every considered line, matched or not."""
        prepared = self._prepare(catalog)
        results: List[LineMatch] = []
        for line in self._lines(text):
            entry, score = self._best(line, prepared)
            if entry is not None and score > self.threshold:
                results.append(LineMatch(line, entry, score, extract_quantity(line)))
                log.debug("Matched %r -> %s (%.2f)", line, entry.name, score)
            else:
                results.append(LineMatch(line, None, score, 0))
                log.debug("No catalog match for %r (best %.2f)", line, score)
        return results

    def match(self, text: str, catalog: Catalog) -> List[ResolvedItem]:
        """
        Resolve every line of `text` that names a catalog item.

        Lines are independent; an item seen on several lines is returned
        several times (see `merge_duplicates`).
        """
        return [
            ResolvedItem(lm.entry.name, lm.quantity)
            for lm in self.match_lines(text, catalog)
            if lm.entry is not None
        ]

    def parse_strict(self, text: str) -> List[ResolvedItem]:
        """Literal "Name <sep> qty" / "Name qty" reader, no catalog involved."""
        items: List[ResolvedItem] = []
        for raw in (text or "").splitlines():
            item = parse_strict_line(raw)
            if item is not None:
                items.append(item)
        return items


def parse_strict_line(raw: str) -> Optional[ResolvedItem]:
    line = raw.strip()
    if not line:
        return None
    if any(pattern.search(line) for pattern in _STRICT_DENYLIST):
        return None

    line = _LEADING_INDEX.sub("", line, count=1)
    line = _TRADEMARK_GLYPHS.sub("", line)

    match = _STRICT_SEPARATED.match(line) or _STRICT_BARE.match(line)
    if not match:
        return None

    name = _NAME_TRAILER.sub("", match.group(1).strip()).strip()
    if len(name) <= 2:
        return None
    try:
        quantity = int(match.group(2))
    except ValueError:
        quantity = DEFAULT_QUANTITY
    return ResolvedItem(" ".join(name.split()), quantity)
