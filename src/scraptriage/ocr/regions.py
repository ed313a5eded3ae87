from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

import cv2
import numpy as np
from tqdm.auto import tqdm

from ..core.types import Region
from .tesseract import image_to_string

log = logging.getLogger(__name__)

Recognizer = Callable[[np.ndarray], str]

# High-pass cut used before OCR: stack counts and labels are the brightest
# thing in a slot, icon art sits well below this.
OCR_THRESHOLD = 160
MIN_OCR_HEIGHT = 50
MIN_OCR_WIDTH = 100

_OCR_DEBUG_DIR: Optional[Path] = None


def enable_ocr_debug(debug_dir: Path) -> None:
    """
    Enable saving OCR debug images into the provided directory.
    """
    global _OCR_DEBUG_DIR
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:  # pragma: no cover - filesystem dependent
        log.warning("Failed to enable OCR debug dir %s: %s", debug_dir, exc)
        _OCR_DEBUG_DIR = None
        return
    _OCR_DEBUG_DIR = debug_dir
    log.info("OCR debug output enabled at %s", debug_dir)


def disable_ocr_debug() -> None:
    global _OCR_DEBUG_DIR
    _OCR_DEBUG_DIR = None


def _save_debug_image(name: str, image: np.ndarray) -> None:
    if _OCR_DEBUG_DIR is None:
        return
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    path = _OCR_DEBUG_DIR / f"{timestamp}_{time.time_ns() % 1_000_000_000:09d}_{name}.png"
    if not cv2.imwrite(str(path), image):  # pragma: no cover - filesystem dependent
        log.warning("Failed to save debug image %s", path)


def load_screenshot(path: Union[str, Path]) -> np.ndarray:
    """
    Decode a screenshot file into a BGR array.

    Raises ValueError when the file is missing or not an image.
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError(f"Could not read image {path}")
    return image


def to_rgba(bgr_image: np.ndarray) -> np.ndarray:
    """BGR(A) or grayscale array -> contiguous RGBA array for the segmenter."""
    if bgr_image.ndim == 2:
        return cv2.cvtColor(bgr_image, cv2.COLOR_GRAY2RGBA)
    if bgr_image.shape[2] == 4:
        return cv2.cvtColor(bgr_image, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(bgr_image, cv2.COLOR_BGR2RGBA)


def crop_region(image: np.ndarray, region: Region, pad: int = 0) -> np.ndarray:
    """Crop `region` (optionally padded) clamped to the image bounds."""
    h, w = image.shape[:2]
    x0 = max(0, region.x - pad)
    y0 = max(0, region.y - pad)
    x1 = min(w, region.right + pad)
    y1 = min(h, region.bottom + pad)
    return image[y0:y1, x0:x1]


def preprocess_for_ocr(
    roi_bgr: np.ndarray,
    threshold: int = OCR_THRESHOLD,
    invert: bool = False,
    upscale: bool = True,
) -> np.ndarray:
    """
    Prepare a slot crop for OCR.

    Steps:
    1. Optionally upscale small crops (Tesseract struggles below ~30px glyphs)
    2. Convert to grayscale
    3. Keep only pixels brighter than `threshold` (white text on dark slots)
    4. Optionally invert so text ends up dark on white
    """
    if roi_bgr.size == 0:
        return roi_bgr

    h, w = roi_bgr.shape[:2]
    if upscale and (h < MIN_OCR_HEIGHT or w < MIN_OCR_WIDTH):
        scale = max(2, min(4, MIN_OCR_WIDTH // max(1, min(h, w))))
        roi_bgr = cv2.resize(roi_bgr, (w * scale, h * scale), interpolation=cv2.INTER_CUBIC)

    if roi_bgr.ndim == 3:
        code = cv2.COLOR_BGRA2GRAY if roi_bgr.shape[2] == 4 else cv2.COLOR_BGR2GRAY
        gray = cv2.cvtColor(roi_bgr, code)
    else:
        gray = roi_bgr

    mode = cv2.THRESH_BINARY_INV if invert else cv2.THRESH_BINARY
    # keep gray >= threshold; cv2 compares strictly
    _, binary = cv2.threshold(gray, max(0, threshold - 1), 255, mode)
    return binary


def _progress(seq: Sequence[Region], enabled: bool) -> Iterable[Region]:
    if enabled:
        return tqdm(seq, total=len(seq), desc="Reading slots", unit="slot")
    return seq


def recognize_regions(
    image: np.ndarray,
    regions: Sequence[Region],
    recognizer: Optional[Recognizer] = None,
    threshold: int = OCR_THRESHOLD,
    invert: bool = False,
    show_progress: bool = False,
) -> List[str]:
    """
    OCR each region of a BGR screenshot.

    Returns one text blob per region, in the same order. A region whose OCR
    call fails yields an empty string; the rest of the scan carries on.
    """
    recognizer = recognizer or image_to_string
    texts: List[str] = []
    for index, region in enumerate(_progress(regions, show_progress)):
        roi = crop_region(image, region)
        processed = preprocess_for_ocr(roi, threshold=threshold, invert=invert)
        _save_debug_image(f"slot{index:03d}_raw", roi)
        _save_debug_image(f"slot{index:03d}_processed", processed)
        try:
            text = recognizer(processed)
        except (RuntimeError, OSError) as exc:
            log.warning("OCR failed for slot %d at %s: %s", index, region.rect, exc)
            text = ""
        texts.append((text or "").strip())
    return texts


def recognize_full_frame(
    image: np.ndarray,
    recognizer: Optional[Recognizer] = None,
    threshold: int = OCR_THRESHOLD,
    invert: bool = False,
) -> str:
    """OCR the whole screenshot as one block (used when no slot was found)."""
    h, w = image.shape[:2]
    if h == 0 or w == 0:
        return ""
    full = Region(0, 0, w, h)
    return recognize_regions(image, [full], recognizer, threshold, invert)[0]
