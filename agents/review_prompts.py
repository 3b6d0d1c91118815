"""Prompt builders for the three review passes."""

from typing import Optional, Sequence

from config import settings
from contracts import CostCodeReference, ReviewFinding, TakeoffItem

AUDITOR_SYSTEM_PROMPT = (
    "You are an expert construction estimator reviewing takeoff items for completeness and accuracy."
)
RESCANNER_SYSTEM_PROMPT = (
    "You are an expert construction estimator re-analyzing plans to find items missed in the initial takeoff."
)
VALIDATOR_SYSTEM_PROMPT = (
    "You are an expert construction estimator validating takeoff quantities and cost code assignments."
)

IMPACT_CHOICES = "critical|high|medium|low"
CATEGORY_CHOICES = "structural|exterior|interior|mep|finishes|other"
MISSING_INFO_SHAPE = """{
          "category": "measurement|quantity|specification|detail|other",
          "missing_data": "What specific information is missing",
          "why_needed": "Why this information is needed for the estimate",
          "where_to_find": "Where to find it (sheet numbers, schedules, etc.)",
          "impact": "critical|high|medium|low"
        }"""


def _fmt_quantity(item: TakeoffItem) -> str:
    if item.quantity is None:
        return "N/A"
    return f"{item.quantity:g}"


def format_item_line(index: int, item: TakeoffItem, with_dimensions: bool = False) -> str:
    """`N. name - qty unit - category - Cost Code: code`, optionally with dimensions."""
    line = f"{index}. {item.display_name} - {_fmt_quantity(item)} {item.unit}".rstrip()
    if not with_dimensions:
        line += f" - {item.category or 'unknown'}"
    line += f" - Cost Code: {item.cost_code or 'N/A'}"
    if with_dimensions:
        line += f" - Dimensions: {item.dimensions or 'N/A'}"
    return line


def _cost_code_block(cost_codes: CostCodeReference) -> str:
    if cost_codes.reference_text.strip():
        return f"COST CODE REFERENCE ({cost_codes.standard_name}):\n{cost_codes.reference_text.strip()}"
    return f"Use {cost_codes.standard_name} cost codes."


def _context_line(context: Optional[str]) -> str:
    return f"\nREVIEW CONTEXT: {context}\n" if context else ""


def build_audit_prompt(
    items: Sequence[TakeoffItem],
    cost_codes: CostCodeReference,
    context: Optional[str] = None,
) -> str:
    """Prompt for the item audit: check every existing item, list omitted ones."""
    items_summary = "\n".join(format_item_line(i, item) for i, item in enumerate(items, start=1))
    standard_name = cost_codes.standard_name

    return f"""You are reviewing a takeoff produced by another estimator model.
{_context_line(context)}
YOUR TASK: Review the takeoff items below and identify:
1. Items with missing or incomplete information
2. Items missing measurements needed for an accurate quantity
3. Items missing counts or quantities
4. Items with incorrect or missing cost codes
5. Items that should be in the takeoff but are absent
6. Items whose quantities cannot be calculated from the available dimensions

TAKEOFF ITEMS TO REVIEW ({len(items)} items):
{items_summary or "(none)"}

{_cost_code_block(cost_codes)}

REVIEW REQUIREMENTS:
- Check each item for the information a complete estimate needs
- Name the missing measurements (length, width, height, area, ...)
- Name the missing counts or quantities
- Verify the cost code assignments against {standard_name}
- Decide whether each quantity can be calculated from what is given
- Use item_index to refer to items by their number in the list above

RESPONSE FORMAT:
Return ONLY a valid JSON object with this structure:
{{
  "reviewed_items": [
    {{
      "item_index": 1,
      "item_name": "Item name from takeoff",
      "status": "complete|missing_measurements|missing_quantity|missing_specs|incorrect_cost_code",
      "missing_information": [
        {MISSING_INFO_SHAPE}
      ],
      "cost_code_issues": "Any issues with the cost code assignment",
      "quantity_calculable": true,
      "notes": "Additional review notes"
    }}
  ],
  "missing_items": [
    {{
      "item_name": "Item that should be in the takeoff",
      "category": "{CATEGORY_CHOICES}",
      "reason": "Why this item should be included",
      "location": "Where in the plans this item appears",
      "cost_code": "Suggested cost code",
      "impact": "{IMPACT_CHOICES}"
    }}
  ],
  "summary": {{
    "items_reviewed": 0,
    "items_with_issues": 0,
    "missing_items_found": 0,
    "critical_issues": 0,
    "notes": "Overall review summary"
  }}
}}

CRITICAL INSTRUCTIONS:
- Be specific about what is missing and why it is needed
- Say where the missing information can be found
- If a quantity cannot be calculated, set quantity_calculable to false and explain why
- Assign impact levels that reflect the effect on the estimate"""


def build_rescan_prompt(
    image_count: int,
    cost_codes: CostCodeReference,
    existing_items: Sequence[TakeoffItem] = (),
    context: Optional[str] = None,
) -> str:
    """Prompt for the plan rescan: look at the pages again for items the takeoff missed."""
    standard_name = cost_codes.standard_name
    cap = settings.max_existing_items_in_rescan_prompt

    existing_note = ""
    if existing_items:
        listed = "\n".join(
            f"{i}. {item.display_name}" for i, item in enumerate(existing_items[:cap], start=1)
        )
        more = "\n... (and more)" if len(existing_items) > cap else ""
        existing_note = (
            f"\n\nEXISTING TAKEOFF ITEMS ({len(existing_items)} items already identified - "
            f"focus on finding items NOT in this list):\n{listed}{more}"
        )

    pages = "page" if image_count == 1 else "pages"

    return f"""You are re-analyzing construction plans to find items the initial takeoff may have missed.
{_context_line(context)}
YOUR TASK:
1. Analyze the provided plan images thoroughly
2. Find items that belong in the takeoff but are missing
3. Identify visible items that lack the measurements or quantities a takeoff needs
4. Focus on items NOT already in the existing takeoff

{_cost_code_block(cost_codes)}

IMAGES PROVIDED: {image_count} {pages} of construction plans{existing_note}

ANALYSIS FOCUS:
- Check every category: structural, exterior, interior, mep, finishes, other
- Account for all doors, windows, fixtures, outlets and switches
- Check for missing material layers (foundation, framing, insulation, finishes)
- Check for missing hardware and accessories

RESPONSE FORMAT:
Return ONLY a valid JSON object with this structure:
{{
  "missing_items": [
    {{
      "name": "Item name",
      "description": "Detailed description",
      "category": "{CATEGORY_CHOICES}",
      "subcategory": "Specific subcategory",
      "cost_code": "Suggested {standard_name} cost code",
      "cost_code_description": "Cost code description",
      "location": "Where in the plans this item appears",
      "bounding_box": {{"page": 1, "x": 0.25, "y": 0.30, "width": 0.15, "height": 0.10}},
      "missing_information": [
        {MISSING_INFO_SHAPE}
      ],
      "confidence": 0.85
    }}
  ],
  "items_with_missing_data": [
    {{
      "item_name": "Item visible in plans",
      "missing_measurements": ["Which measurements are missing"],
      "missing_quantities": ["Which quantities are missing"],
      "where_to_find": "Where to find the missing information",
      "impact": "{IMPACT_CHOICES}"
    }}
  ],
  "summary": {{
    "missing_items_found": 0,
    "items_with_missing_data": 0,
    "critical_missing_info": 0,
    "notes": "Summary of findings"
  }}
}}

CRITICAL INSTRUCTIONS:
- Only report items NOT in the existing takeoff
- Check all plan pages
- Bounding boxes use coordinates normalised to 0-1 on the given page
- Use correct {standard_name} cost codes"""


def build_validation_prompt(
    items: Sequence[TakeoffItem],
    review_findings: Optional[ReviewFinding] = None,
    context: Optional[str] = None,
) -> str:
    """Prompt for quantity validation, cross-checked against the item audit when available."""
    items_block = "\n".join(
        format_item_line(i, item, with_dimensions=True) for i, item in enumerate(items, start=1)
    )

    findings_block = ""
    if review_findings is not None and review_findings.reviewed_items:
        lines = [
            f"- {r.item_name}: {r.status} - "
            f"{'Quantity calculable' if r.quantity_calculable else 'Quantity NOT calculable'}"
            for r in review_findings.reviewed_items
        ]
        findings_block += "\nREVIEW FINDINGS:\n" + "\n".join(lines) + "\n"
    if review_findings is not None and review_findings.missing_items:
        lines = [f"- {m.item_name}: {m.reason}" for m in review_findings.missing_items]
        findings_block += "\nMISSING ITEMS IDENTIFIED:\n" + "\n".join(lines) + "\n"

    return f"""You are validating takeoff quantities and cost code assignments.
{_context_line(context)}
YOUR TASK:
1. Validate that quantities can be calculated from the available measurements
2. Verify cost code assignments
3. Check for discrepancies between the primary takeoff and the review findings
4. Flag items whose calculation is impossible because data is missing

PRIMARY TAKEOFF ITEMS:
{items_block or "(none)"}
{findings_block}
RESPONSE FORMAT:
Return ONLY a valid JSON object with this structure:
{{
  "validated_items": [
    {{
      "item_index": 1,
      "item_name": "Item name",
      "quantity_valid": true,
      "quantity_validation_notes": "Why the quantity is valid or invalid",
      "cost_code_valid": true,
      "cost_code_validation_notes": "Any cost code issues",
      "calculation_possible": true,
      "missing_for_calculation": ["What is missing to calculate the quantity"],
      "discrepancies": ["Any discrepancies found"],
      "recommendation": "Recommendation for this item"
    }}
  ],
  "impossible_calculations": [
    {{
      "item_name": "Item name",
      "reason": "Why the calculation is impossible",
      "missing_data": ["Which data is missing"],
      "impact": "{IMPACT_CHOICES}"
    }}
  ],
  "summary": {{
    "items_validated": 0,
    "valid_quantities": 0,
    "invalid_quantities": 0,
    "impossible_calculations": 0,
    "cost_code_issues": 0,
    "notes": "Validation summary"
  }}
}}

CRITICAL INSTRUCTIONS:
- Be strict: flag every item whose quantity cannot be calculated
- List each piece of missing data separately in missing_data
- Give a clear recommendation per item"""
