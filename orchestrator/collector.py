"""Flatten the missing-information findings of all three passes into one list."""

import logging
from typing import Dict, List, Optional, Sequence

from contracts import (
    Impact,
    MissingInfoCategory,
    MissingInformationEntry,
    MissingInformationSummary,
    Origin,
    ReanalysisFinding,
    ReviewFinding,
    TakeoffItem,
    ValidationFinding,
)

logger = logging.getLogger(__name__)

IMPOSSIBLE_CALCULATION_WHERE_TO_FIND = "Check plans for missing dimensions or specifications"
IMPOSSIBLE_CALCULATION_ACTION = "Provide missing measurement/spec to enable calculation"


def _item_at(items: Sequence[TakeoffItem], item_index: int) -> Optional[TakeoffItem]:
    """Resolve a 1-based item index from the audit back to the takeoff."""
    if 1 <= item_index <= len(items):
        return items[item_index - 1]
    return None


def _item_named(items: Sequence[TakeoffItem], name: str) -> Optional[TakeoffItem]:
    wanted = name.strip().lower()
    if not wanted:
        return None
    for item in items:
        if item.name.strip().lower() == wanted or item.description.strip().lower() == wanted:
            return item
    return None


def collect_missing_information(
    review: ReviewFinding,
    reanalysis: ReanalysisFinding,
    validation: ValidationFinding,
    items: Sequence[TakeoffItem],
) -> List[MissingInformationEntry]:
    """Build the flat missing-information list, in pass order.

    1. Item audit: each reviewed item's missing_information, tied to the takeoff item
       by index (id and location attached).
    2. Plan rescan: each newly found item's missing_information, with its location.
    3. Quantity validation: one measurement entry per missing_data string of each
       impossible calculation.
    """
    entries: List[MissingInformationEntry] = []

    for reviewed in review.reviewed_items:
        if not reviewed.missing_information:
            continue
        original = _item_at(items, reviewed.item_index)
        item_name = reviewed.item_name or (original.display_name if original else "")
        for missing in reviewed.missing_information:
            entries.append(MissingInformationEntry(
                item_id=original.id if original else None,
                item_name=item_name,
                category=missing.category,
                missing_data=missing.missing_data,
                why_needed=missing.why_needed,
                where_to_find=missing.where_to_find,
                impact=missing.impact,
                location=original.location if original else None,
                origin=Origin.ITEM_AUDIT,
            ))

    for found in reanalysis.missing_items:
        for missing in found.missing_information:
            entries.append(MissingInformationEntry(
                item_name=found.name,
                category=missing.category,
                missing_data=missing.missing_data,
                why_needed=missing.why_needed,
                where_to_find=missing.where_to_find,
                impact=missing.impact,
                location=found.location or None,
                origin=Origin.PLAN_RESCAN,
            ))

    for calc in validation.impossible_calculations:
        original = _item_named(items, calc.item_name)
        for missing_data in calc.missing_data:
            entries.append(MissingInformationEntry(
                item_id=original.id if original else None,
                item_name=calc.item_name,
                category=MissingInfoCategory.MEASUREMENT,
                missing_data=missing_data,
                why_needed=calc.reason,
                where_to_find=IMPOSSIBLE_CALCULATION_WHERE_TO_FIND,
                impact=calc.impact,
                suggested_action=IMPOSSIBLE_CALCULATION_ACTION,
                location=original.location if original else None,
                origin=Origin.QUANTITY_VALIDATION,
            ))

    logger.info("Collected %d missing-information entries", len(entries))
    return entries


def summarize_missing_information(
    entries: Sequence[MissingInformationEntry],
) -> MissingInformationSummary:
    """Totals by category and impact, plus the number of distinct items affected."""
    by_category: Dict[str, int] = {c.value: 0 for c in MissingInfoCategory}
    by_impact: Dict[str, int] = {i.value: 0 for i in Impact}
    affected = set()

    for entry in entries:
        by_category[entry.category.value] += 1
        by_impact[entry.impact.value] += 1
        affected.add(entry.item_id or entry.item_name.strip().lower())

    return MissingInformationSummary(
        total_missing=len(entries),
        by_category=by_category,
        by_impact=by_impact,
        items_affected=len(affected),
    )
