from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pytesseract

log = logging.getLogger(__name__)

# Inventory labels only ever use these glyphs; restricting the alphabet keeps
# Tesseract from inventing punctuation out of icon edges.
CHAR_WHITELIST = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789:xX()[]/-."
)
DEFAULT_LANG = "eng"
DEFAULT_CONFIG = f"--psm 6 -c tessedit_char_whitelist={CHAR_WHITELIST}"


def initialize_ocr(tesseract_cmd: Optional[str] = None) -> str:
    """
    Point pytesseract at the binary and make sure it runs.

    Returns the Tesseract version string. Raises RuntimeError when the
    binary cannot be found.
    """
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
    try:
        version = str(pytesseract.get_tesseract_version())
    except pytesseract.TesseractNotFoundError as exc:
        raise RuntimeError(
            "Tesseract is not installed or not on PATH; "
            "set tesseract_cmd with `scraptriage config set tesseract_cmd PATH`"
        ) from exc
    log.info("Using Tesseract %s", version)
    return version


def image_to_string(
    image: np.ndarray,
    lang: str = DEFAULT_LANG,
    config: str = DEFAULT_CONFIG,
) -> str:
    """OCR a preprocessed image region into raw text."""
    return pytesseract.image_to_string(image, lang=lang, config=config)
