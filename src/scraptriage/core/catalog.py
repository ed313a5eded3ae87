from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

log = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "items.json"


class CatalogError(ValueError):
    """Raised when a catalog file cannot be used at all."""


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    category: str = "misc"
    used_for_quests: bool = False
    used_for_workshop: bool = False
    used_for_crafting: bool = False
    used_for_special_vendor: bool = False
    default_keep_min: Optional[int] = None

    @property
    def is_essential(self) -> bool:
        """Needed for a quest, workshop, recipe or special vendor."""
        return (
            self.used_for_quests
            or self.used_for_workshop
            or self.used_for_crafting
            or self.used_for_special_vendor
        )


class Catalog(Mapping[str, CatalogEntry]):
    """
    Immutable name -> entry table.

    Lookups are exact first, then case-insensitive. Iteration follows the
    order the entries were given in.
    """

    def __init__(self, entries: Iterable[CatalogEntry], metadata: Optional[dict] = None):
        by_name: Dict[str, CatalogEntry] = {}
        folded: Dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.name in by_name:
                log.warning("Duplicate catalog entry %r; keeping the first", entry.name)
                continue
            by_name[entry.name] = entry
            folded.setdefault(entry.name.casefold(), entry)
        self._entries = MappingProxyType(by_name)
        self._folded = MappingProxyType(folded)
        self.metadata = MappingProxyType(dict(metadata or {}))

    def __getitem__(self, name: str) -> CatalogEntry:
        entry = self.get(name)
        if entry is None:
            raise KeyError(name)
        return entry

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Catalog({len(self)} entries)"

    def get(self, name, default=None):  # type: ignore[override]
        if not isinstance(name, str):
            return default
        entry = self._entries.get(name)
        if entry is None:
            entry = self._folded.get(name.strip().casefold())
        return entry if entry is not None else default

    @property
    def entries(self) -> List[CatalogEntry]:
        return list(self._entries.values())

    def categories(self) -> List[str]:
        return sorted({entry.category for entry in self._entries.values()})


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def _parse_keep_min(name: str, value: object) -> Optional[int]:
    if value is None:
        log.debug("Catalog entry %r has no defaultKeepMin; rule defaults apply", name)
        return None
    if isinstance(value, bool):
        log.warning("Ignoring boolean defaultKeepMin for %r", name)
        return None
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        log.warning("Ignoring non-integer defaultKeepMin %r for %r", value, name)
        return None
    if parsed < 0:
        log.warning("Ignoring negative defaultKeepMin %d for %r", parsed, name)
        return None
    return parsed


def entry_from_dict(raw: dict) -> Optional[CatalogEntry]:
    """Build an entry from its JSON form; None when the name is unusable."""
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    name = " ".join(name.split())
    category = raw.get("category")
    if not isinstance(category, str) or not category.strip():
        category = "misc"
    return CatalogEntry(
        name=name,
        category=category.strip().lower(),
        used_for_quests=_as_bool(raw.get("usedForQuests", False)),
        used_for_workshop=_as_bool(raw.get("usedForWorkshop", False)),
        used_for_crafting=_as_bool(raw.get("usedForCrafting", False)),
        used_for_special_vendor=_as_bool(raw.get("usedForSpecialVendor", False)),
        default_keep_min=_parse_keep_min(name, raw.get("defaultKeepMin")),
    )


def catalog_from_payload(payload: object, source: str = "<payload>") -> Catalog:
    if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
        raise CatalogError(f"Catalog {source} must be an object with an 'items' array")

    entries: List[CatalogEntry] = []
    for index, raw in enumerate(payload["items"]):
        if not isinstance(raw, dict):
            log.warning("Skipping catalog item #%d in %s: not an object", index, source)
            continue
        entry = entry_from_dict(raw)
        if entry is None:
            log.warning("Skipping catalog item #%d in %s: missing name", index, source)
            continue
        entries.append(entry)

    metadata = payload.get("metadata")
    return Catalog(entries, metadata if isinstance(metadata, dict) else None)


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load a catalog JSON file.

    Raises CatalogError when the file is missing, unreadable or not a catalog.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CatalogError(f"Catalog file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Could not parse catalog {path}: {exc}") from exc
    except OSError as exc:
        raise CatalogError(f"Could not read catalog {path}: {exc}") from exc

    catalog = catalog_from_payload(raw, str(path))
    log.info("Loaded %d catalog entries from %s", len(catalog), path)
    return catalog


def load_default_catalog() -> Catalog:
    """Load the catalog bundled with the package."""
    text = (
        resources.files("scraptriage")
        .joinpath("data")
        .joinpath(DEFAULT_CATALOG_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return catalog_from_payload(json.loads(text), DEFAULT_CATALOG_RESOURCE)


def resolve_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """Load `path` when given, else the bundled catalog."""
    if path:
        return load_catalog(path)
    return load_default_catalog()
