from .catalog import Catalog, CatalogEntry, CatalogError, load_catalog, load_default_catalog
from .edit_distance import distance, similarity
from .matcher import CatalogMatcher, DuplicatePolicy, LineMatch, extract_quantity, merge_duplicates
from .segmenter import SlotSegmenter, segment
from .triage import TriageClassifier, classify
from .types import Action, ClassifiedItem, Region, ResolvedItem

__all__ = [
    "Action",
    "Catalog",
    "CatalogEntry",
    "CatalogError",
    "CatalogMatcher",
    "ClassifiedItem",
    "DuplicatePolicy",
    "LineMatch",
    "Region",
    "ResolvedItem",
    "SlotSegmenter",
    "TriageClassifier",
    "classify",
    "distance",
    "extract_quantity",
    "load_catalog",
    "load_default_catalog",
    "merge_duplicates",
    "segment",
    "similarity",
]
