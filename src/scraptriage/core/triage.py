from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional

from .catalog import Catalog, CatalogEntry
from .types import Action, ClassifiedItem, ResolvedItem

UNKNOWN_CATEGORY = "unknown"


class TriageClassifier:
    """
    Deterministic keep / maybe / recycle rules.

    Rules, first match wins:
    1. Not in the catalog -> KEEP (never discard what we cannot identify)
    2. Quest / workshop / crafting / special-vendor item -> KEEP up to the
       keep minimum, MAYBE above it
    3. Ammo and bulk materials -> RECYCLE above twice the keep minimum,
       otherwise KEEP
    4. Anything else -> MAYBE above the keep minimum, otherwise KEEP

    Each rule has its own fallback when an entry leaves `default_keep_min`
    unset; an explicit 0 is honoured.
    """

    ESSENTIAL_KEEP_MIN = 1
    BULK_KEEP_MIN = 10
    RESERVE_KEEP_MIN = 1
    BULK_CATEGORIES: FrozenSet[str] = frozenset({"ammo", "material"})
    RECYCLE_FACTOR = 2

    @staticmethod
    def _keep_min(entry: CatalogEntry, fallback: int) -> int:
        if entry.default_keep_min is None:
            return fallback
        return entry.default_keep_min

    def classify_item(self, item: ResolvedItem, catalog: Catalog) -> ClassifiedItem:
        entry: Optional[CatalogEntry] = catalog.get(item.name)
        quantity = max(0, int(item.quantity))

        if entry is None:
            return ClassifiedItem(
                name=item.name,
                quantity=quantity,
                action=Action.KEEP,
                reason="unknown item, keep conservatively",
                category=UNKNOWN_CATEGORY,
            )

        if entry.is_essential:
            keep_min = self._keep_min(entry, self.ESSENTIAL_KEEP_MIN)
            if quantity <= keep_min:
                action, reason = Action.KEEP, f"essential, hold at least {keep_min}"
            else:
                action, reason = (
                    Action.MAYBE,
                    f"surplus beyond {keep_min}, consider selling excess",
                )
        elif entry.category in self.BULK_CATEGORIES:
            keep_min = self._keep_min(entry, self.BULK_KEEP_MIN)
            cutoff = keep_min * self.RECYCLE_FACTOR
            if quantity > cutoff:
                action, reason = Action.RECYCLE, f"excessive amount, above {cutoff}"
            else:
                action, reason = Action.KEEP, "standard supply"
        else:
            keep_min = self._keep_min(entry, self.RESERVE_KEEP_MIN)
            if quantity > keep_min:
                action, reason = Action.MAYBE, f"above reserve {keep_min}"
            else:
                action, reason = Action.KEEP, "reserve stock"

        return ClassifiedItem(
            name=entry.name,
            quantity=quantity,
            action=action,
            reason=reason,
            category=entry.category,
        )

    def classify(self, items: Iterable[ResolvedItem], catalog: Catalog) -> List[ClassifiedItem]:
        return [self.classify_item(item, catalog) for item in items]


def classify(items: Iterable[ResolvedItem], catalog: Catalog) -> List[ClassifiedItem]:
    return TriageClassifier().classify(items, catalog)
