from .regions import (
    crop_region,
    disable_ocr_debug,
    enable_ocr_debug,
    load_screenshot,
    preprocess_for_ocr,
    recognize_full_frame,
    recognize_regions,
    to_rgba,
)
from .tesseract import image_to_string, initialize_ocr

__all__ = [
    "crop_region",
    "disable_ocr_debug",
    "enable_ocr_debug",
    "image_to_string",
    "initialize_ocr",
    "load_screenshot",
    "preprocess_for_ocr",
    "recognize_full_frame",
    "recognize_regions",
    "to_rgba",
]
