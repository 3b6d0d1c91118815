"""Merge the missing-item lists of the two discovery passes.

The item audit and the plan rescan both report items absent from the takeoff.
Entries are keyed by (name, category), case-insensitive and trimmed; a key seen
in both lists is emitted once and tagged `both`. Provenance comes from the entry
type, so the result does not depend on argument order.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from contracts import (
    Impact,
    MissingItem,
    ReanalysisMissingItem,
    ReviewMissingItem,
    Source,
)

logger = logging.getLogger(__name__)

DiscoveryEntry = Union[ReviewMissingItem, ReanalysisMissingItem]

REANALYSIS_DEFAULT_REASON = "Found in plan reanalysis"


def merge_key(name: str, category: str) -> Tuple[str, str]:
    return (name.strip().lower(), category.strip().lower())


def _from_review(entry: ReviewMissingItem) -> MissingItem:
    return MissingItem(
        name=entry.item_name.strip(),
        category=entry.category.strip(),
        reason=entry.reason,
        location=entry.location,
        cost_code=entry.cost_code,
        impact=entry.impact,
        source=Source.REVIEWER1,
    )


def _from_reanalysis(entry: ReanalysisMissingItem) -> MissingItem:
    impact = entry.missing_information[0].impact if entry.missing_information else Impact.MEDIUM
    return MissingItem(
        name=entry.name.strip(),
        category=entry.category.strip(),
        reason=entry.description or REANALYSIS_DEFAULT_REASON,
        location=entry.location,
        cost_code=entry.cost_code,
        impact=impact,
        source=Source.REVIEWER2,
    )


def _to_missing_item(entry: DiscoveryEntry) -> Optional[MissingItem]:
    if isinstance(entry, ReviewMissingItem):
        item = _from_review(entry)
    elif isinstance(entry, ReanalysisMissingItem):
        item = _from_reanalysis(entry)
    else:
        raise TypeError(f"Cannot merge entry of type {type(entry).__name__}")
    if not item.name:
        logger.debug("Skipping %s missing item with no name", item.source.value)
        return None
    return item


def _combine(existing: MissingItem, incoming: MissingItem) -> MissingItem:
    """Fold two reports of the same item into one `both` entry.

    The item audit's text wins; blanks are filled from the plan rescan; the more
    severe impact is kept.
    """
    if existing.source == Source.REVIEWER1:
        primary, secondary = existing, incoming
    else:
        primary, secondary = incoming, existing

    impact = max(existing.impact, incoming.impact, key=lambda i: i.rank)
    return MissingItem(
        name=primary.name or secondary.name,
        category=primary.category or secondary.category,
        reason=primary.reason or secondary.reason,
        location=primary.location or secondary.location,
        cost_code=primary.cost_code or secondary.cost_code,
        impact=impact,
        source=Source.BOTH,
    )


def merge_missing_items(
    first: Iterable[DiscoveryEntry],
    second: Iterable[DiscoveryEntry] = (),
) -> List[MissingItem]:
    """Combine both discovery lists into one deduplicated list, first-seen order.

    Either list may hold item-audit or plan-rescan entries (or a mix).
    """
    merged: Dict[Tuple[str, str], MissingItem] = {}

    for entry in [*first, *second]:
        item = _to_missing_item(entry)
        if item is None:
            continue
        key = merge_key(item.name, item.category)
        existing = merged.get(key)
        if existing is None:
            merged[key] = item
        elif existing.source != Source.BOTH and existing.source != item.source:
            merged[key] = _combine(existing, item)
        # repeats within one pass keep the first entry

    result = list(merged.values())
    logger.info(
        "Merged %d missing items (%d from both passes)",
        len(result),
        sum(1 for m in result if m.source == Source.BOTH),
    )
    return result
