"""Tests for the review data contracts."""

import json

import pytest
from pydantic import ValidationError

from contracts import (
    CostCodeReference,
    Impact,
    MissingInfoCategory,
    PassStatus,
    ReanalysisFinding,
    ReviewFinding,
    ReviewOrchestratorResult,
    TakeoffItem,
    TokenUsage,
    ValidationFinding,
)


class TestTakeoffItem:
    """Test TakeoffItem."""

    def test_location_and_confidence_aliases(self):
        item = TakeoffItem.model_validate(
            {"name": "Slab", "location_reference": "S-1", "confidence_score": 0.9}
        )
        assert item.location == "S-1"
        assert item.confidence == 0.9

    def test_frozen(self):
        item = TakeoffItem(name="Slab")
        with pytest.raises(ValidationError):
            item.name = "Footing"

    def test_display_name_falls_back_to_description(self):
        assert TakeoffItem(description="Cast-in-place slab").display_name == "Cast-in-place slab"
        assert TakeoffItem().display_name == "Unnamed item"

    def test_unknown_keys_ignored(self):
        item = TakeoffItem.model_validate({"name": "Slab", "bounding_box": {"page": 1}})
        assert item.name == "Slab"


class TestCostCodeReference:
    """Test CostCodeReference."""

    def test_known_standard_name(self):
        assert CostCodeReference(standard="nahb").standard_name == "NAHB Residential Cost Codes"

    def test_unknown_standard_name(self):
        assert CostCodeReference(standard="custom").standard_name == "CUSTOM"

    def test_explicit_name_kept(self):
        ref = CostCodeReference(standard="csi-16", standard_name="Company codes")
        assert ref.standard_name == "Company codes"


class TestLenientFindings:
    """Model output is defaulted at the parsing boundary instead of rejected."""

    def test_nulls_become_defaults(self):
        finding = ReviewFinding.model_validate({
            "reviewed_items": [{"item_index": None, "item_name": None, "quantity_calculable": None}],
            "missing_items": None,
            "summary": None,
        })
        reviewed = finding.reviewed_items[0]
        assert reviewed.item_index == 0
        assert reviewed.item_name == ""
        assert reviewed.quantity_calculable is True
        assert finding.missing_items == []
        assert finding.summary.items_reviewed == 0

    def test_enum_normalisation(self):
        finding = ReviewFinding.model_validate({
            "reviewed_items": [{
                "item_index": 1,
                "missing_information": [
                    {"category": "Measurement", "impact": "HIGH"},
                    {"category": "dimensions", "impact": "urgent"},
                ],
            }],
        })
        first, second = finding.reviewed_items[0].missing_information
        assert first.category == MissingInfoCategory.MEASUREMENT
        assert first.impact == Impact.HIGH
        assert second.category == MissingInfoCategory.OTHER
        assert second.impact == Impact.MEDIUM

    def test_non_object_entries_dropped(self):
        finding = ReanalysisFinding.model_validate({
            "missing_items": ["Exhaust fan", {"name": "Smoke detector"}, 7, None],
        })
        assert [m.name for m in finding.missing_items] == ["Smoke detector"]

    def test_string_lists_stringified(self):
        finding = ValidationFinding.model_validate({
            "impossible_calculations": [{"item_name": "Doors", "missing_data": ["count", 3, None, {"x": 1}]}],
        })
        assert finding.impossible_calculations[0].missing_data == ["count", "3"]

    def test_single_string_becomes_list(self):
        finding = ValidationFinding.model_validate({
            "validated_items": [{"item_index": "2", "discrepancies": "Quantity doubled"}],
        })
        validated = finding.validated_items[0]
        assert validated.item_index == 2
        assert validated.discrepancies == ["Quantity doubled"]

    def test_unparseable_integer_is_zero(self):
        finding = ReviewFinding.model_validate({"reviewed_items": [{"item_index": "first"}]})
        assert finding.reviewed_items[0].item_index == 0

    def test_non_finite_numbers_are_zero(self):
        raw = json.loads(
            '{"reviewed_items": [{"item_index": 1e999}, {"item_index": "Infinity"}, {"item_index": NaN}],'
            ' "summary": {"items_reviewed": -Infinity}}'
        )
        finding = ReviewFinding.model_validate(raw)
        assert [r.item_index for r in finding.reviewed_items] == [0, 0, 0]
        assert finding.summary.items_reviewed == 0

        rescan = ReanalysisFinding.model_validate(json.loads(
            '{"missing_items": [{"name": "Vent", "confidence": NaN,'
            ' "bounding_box": {"x": Infinity, "y": "-inf", "width": 1e999}}]}'
        ))
        item = rescan.missing_items[0]
        assert item.confidence == 0.0
        assert (item.bounding_box.x, item.bounding_box.y, item.bounding_box.width) == (0.0, 0.0, 0.0)

    def test_boolean_strings(self):
        finding = ReviewFinding.model_validate({"reviewed_items": [{"quantity_calculable": "false"}]})
        assert finding.reviewed_items[0].quantity_calculable is False

    def test_summary_not_an_object(self):
        finding = ValidationFinding.model_validate({"validated_items": [], "summary": "all good"})
        assert finding.summary.items_validated == 0


class TestImpact:
    """Test Impact ordering."""

    def test_rank_order(self):
        ranked = sorted(Impact, key=lambda i: i.rank, reverse=True)
        assert ranked == [Impact.CRITICAL, Impact.HIGH, Impact.MEDIUM, Impact.LOW]


class TestReviewOrchestratorResult:
    """Test the aggregate result contract."""

    def _result(self, **status):
        return ReviewOrchestratorResult(
            review_result=ReviewFinding(),
            reanalysis_result=ReanalysisFinding(),
            validation_result=ValidationFinding(),
            pass_status=status,
        )

    def test_camel_case_serialisation(self):
        data = json.loads(self._result(item_auditor=PassStatus.OK).model_dump_json(by_alias=True))
        for key in (
            "reviewResult",
            "reanalysisResult",
            "validationResult",
            "mergedMissingItems",
            "allMissingInformation",
            "missingInformationSummary",
            "passStatus",
        ):
            assert key in data
        assert data["passStatus"] == {"item_auditor": "ok"}

    def test_populate_by_alias(self):
        result = ReviewOrchestratorResult.model_validate({
            "reviewResult": {},
            "reanalysisResult": {},
            "validationResult": {},
        })
        assert result.merged_missing_items == []

    def test_degraded(self):
        assert not self._result(item_auditor=PassStatus.OK, plan_rescanner=PassStatus.SKIPPED).degraded
        assert self._result(item_auditor=PassStatus.PARSE_ERROR).degraded
        assert self._result(item_auditor=PassStatus.CANCELLED).degraded


class TestTokenUsage:
    """Test TokenUsage costing."""

    def test_reported_cost_preferred(self):
        assert TokenUsage(input_tokens=1000, output_tokens=1000, reported_cost=0.5).total_cost == 0.5

    def test_priced_from_settings(self):
        usage = TokenUsage(input_tokens=1_000_000, output_tokens=0)
        assert usage.total_cost == pytest.approx(2.50)
