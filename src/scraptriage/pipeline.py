"""
End-to-end triage: screenshot -> slots -> text -> catalog items -> actions.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import DEFAULT_SETTINGS, TriageSettings
from .core.catalog import Catalog
from .core.matcher import CatalogMatcher, DuplicatePolicy, LineMatch, merge_duplicates
from .core.segmenter import SlotSegmenter
from .core.triage import TriageClassifier
from .core.types import Action, ClassifiedItem, Region, ResolvedItem
from .ocr.regions import Recognizer, recognize_full_frame, recognize_regions, to_rgba

log = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    text: str
    lines: List[LineMatch]
    resolved: List[ResolvedItem]
    classified: List[ClassifiedItem]
    regions: List[Region] = field(default_factory=list)
    used_full_frame: bool = False
    processing_seconds: float = 0.0

    @property
    def unmatched_lines(self) -> List[str]:
        return [lm.line for lm in self.lines if not lm.matched]

    def summary(self) -> Counter:
        counts: Counter = Counter()
        for item in self.classified:
            counts[item.action.value] += 1
        return counts

    def to_dict(self) -> dict:
        return {
            "regions": [list(region.rect) for region in self.regions],
            "items": [item.to_dict() for item in self.classified],
            "unmatched": self.unmatched_lines,
            "summary": {action.value: self.summary().get(action.value, 0) for action in Action},
        }


class TriagePipeline:
    """Wires the segmenter, matcher and classifier around one shared catalog."""

    def __init__(
        self,
        catalog: Catalog,
        settings: TriageSettings = DEFAULT_SETTINGS,
        segmenter: Optional[SlotSegmenter] = None,
        matcher: Optional[CatalogMatcher] = None,
        classifier: Optional[TriageClassifier] = None,
    ):
        self.catalog = catalog
        self.settings = settings
        self.segmenter = segmenter or SlotSegmenter()
        self.matcher = matcher or CatalogMatcher(
            threshold=settings.match_threshold,
            min_line_length=settings.min_line_length,
        )
        self.classifier = classifier or TriageClassifier()

    def resolve(self, text: str) -> Tuple[List[LineMatch], List[ResolvedItem]]:
        """Text -> (line diagnostics, resolved items) with fallback + duplicate policy."""
        lines = self.matcher.match_lines(text, self.catalog)
        resolved = [
            ResolvedItem(lm.entry.name, lm.quantity) for lm in lines if lm.entry is not None
        ]

        if self.settings.strict_fallback:
            rejected = "\n".join(lm.line for lm in lines if not lm.matched)
            extra = self.matcher.parse_strict(rejected)
            if extra:
                log.info("Strict parser recovered %d unmatched line(s)", len(extra))
            resolved.extend(extra)

        policy = DuplicatePolicy(self.settings.duplicate_policy)
        return lines, merge_duplicates(resolved, policy)

    def analyze_text(self, text: str) -> PipelineResult:
        start = time.perf_counter()
        lines, resolved = self.resolve(text)
        classified = self.classifier.classify(resolved, self.catalog)
        return PipelineResult(
            text=text,
            lines=lines,
            resolved=resolved,
            classified=classified,
            processing_seconds=time.perf_counter() - start,
        )

    def segment(self, bgr_image: np.ndarray) -> List[Region]:
        rgba = to_rgba(bgr_image)
        height, width = rgba.shape[:2]
        return self.segmenter.segment(rgba, width, height, self.settings.brightness_threshold)

    def analyze_image(
        self,
        bgr_image: np.ndarray,
        recognizer: Optional[Recognizer] = None,
        show_progress: bool = False,
    ) -> PipelineResult:
        """
        Segment a BGR screenshot, OCR each slot, and triage what was read.

        When no slot is found and `full_frame_fallback` is set, the whole
        frame is read as one block instead.
        """
        start = time.perf_counter()
        settings = self.settings
        regions = self.segment(bgr_image)
        log.info("Found %d candidate slot(s)", len(regions))

        used_full_frame = False
        if regions:
            texts = recognize_regions(
                bgr_image,
                regions,
                recognizer,
                threshold=settings.ocr_threshold,
                invert=settings.ocr_invert,
                show_progress=show_progress,
            )
            text = "\n".join(t for t in texts if t)
        elif settings.full_frame_fallback:
            log.info("No slots found; reading the full frame")
            text = recognize_full_frame(
                bgr_image,
                recognizer,
                threshold=settings.ocr_threshold,
                invert=settings.ocr_invert,
            )
            used_full_frame = True
        else:
            text = ""

        result = self.analyze_text(text)
        result.regions = regions
        result.used_full_frame = used_full_frame
        result.processing_seconds = time.perf_counter() - start
        return result
