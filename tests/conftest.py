"""Shared fixtures: a scripted inference gateway and a small takeoff."""

import json
import os
import threading
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

# Use litellm's bundled model cost map; the remote fetch on import is unreachable offline
# and its retry logging can deadlock the first `import litellm` under pytest.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from agents.review_prompts import (
    AUDITOR_SYSTEM_PROMPT,
    RESCANNER_SYSTEM_PROMPT,
    VALIDATOR_SYSTEM_PROMPT,
)
from contracts import CostCodeReference, TakeoffItem
from providers.base import LLMProvider, LLMResponse

Reply = Union[str, Exception, Callable[..., str]]


class ScriptedProvider(LLMProvider):
    """Answers each reviewer from a script keyed by its system prompt.

    A script entry is a reply or a list of replies consumed in order. A reply
    is response text, an exception to raise, or a callable returning text.
    """

    def __init__(self, script: Optional[Dict[str, Any]] = None):
        self.script = {k: list(v) if isinstance(v, list) else v for k, v in (script or {}).items()}
        self.calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "scripted"

    @property
    def default_model(self) -> str:
        return "scripted-model"

    def calls_for(self, system_prompt: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["system_prompt"] == system_prompt]

    def complete(self, system_prompt, user_message, **kwargs) -> LLMResponse:
        with self._lock:
            self.calls.append({"system_prompt": system_prompt, "user_message": user_message, **kwargs})
            entry = self.script.get(system_prompt, "{}")
            reply = entry.pop(0) if isinstance(entry, list) else entry

        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(system_prompt=system_prompt, user_message=user_message, **kwargs)
        return LLMResponse(
            content=reply,
            input_tokens=100,
            output_tokens=50,
            model="scripted-model",
            provider=self.name,
        )


AUDIT = AUDITOR_SYSTEM_PROMPT
RESCAN = RESCANNER_SYSTEM_PROMPT
VALIDATE = VALIDATOR_SYSTEM_PROMPT


@pytest.fixture
def takeoff_items():
    return [
        TakeoffItem(
            id="item-1",
            name="Concrete slab",
            quantity=1200,
            unit="SF",
            category="structural",
            cost_code="03 30 00",
            location="Sheet S-1",
            dimensions="30' x 40'",
        ),
        TakeoffItem(
            id="item-2",
            name="Interior doors",
            quantity=None,
            unit="EA",
            category="interior",
            location_reference="Sheet A-2",
        ),
        TakeoffItem(
            id="item-3",
            name="Drywall",
            quantity=4800,
            unit="SF",
            category="finishes",
            cost_code="09 29 00",
        ),
    ]


@pytest.fixture
def cost_codes():
    return CostCodeReference(standard="csi-16", reference_text="03 - Concrete\n09 - Finishes")


@pytest.fixture
def plan_images():
    return ["data:image/png;base64,AAAA", "https://plans.example.com/page-2.png"]


def audit_response(**overrides) -> str:
    body = {
        "reviewed_items": [
            {
                "item_index": 1,
                "item_name": "Concrete slab",
                "status": "complete",
                "missing_information": [],
                "quantity_calculable": True,
            },
            {
                "item_index": 2,
                "item_name": "Interior doors",
                "status": "missing_quantity",
                "missing_information": [
                    {
                        "category": "quantity",
                        "missing_data": "Door count",
                        "why_needed": "Doors are priced each",
                        "where_to_find": "Door schedule on A-6",
                        "impact": "high",
                    }
                ],
                "quantity_calculable": False,
            },
        ],
        "missing_items": [
            {
                "item_name": "Vapor barrier",
                "category": "structural",
                "reason": "Required under slab",
                "location": "Sheet S-1",
                "cost_code": "07 26 00",
                "impact": "medium",
            }
        ],
        "summary": {"items_reviewed": 3, "items_with_issues": 1, "missing_items_found": 1},
    }
    body.update(overrides)
    return json.dumps(body)


def rescan_response(**overrides) -> str:
    body = {
        "missing_items": [
            {
                "name": "vapor barrier ",
                "description": "Poly sheeting below slab",
                "category": "Structural",
                "cost_code": "07 26 00",
                "location": "Section 3/S-2",
                "missing_information": [
                    {"category": "specification", "missing_data": "Mil thickness", "impact": "critical"}
                ],
            },
            {
                "name": "Exhaust fans",
                "category": "mep",
                "location": "Bath 1",
                "missing_information": [
                    {"category": "specification", "missing_data": "CFM rating", "impact": "low"}
                ],
            },
        ],
        "items_with_missing_data": [],
        "summary": {"missing_items_found": 2},
    }
    body.update(overrides)
    return json.dumps(body)


def validation_response(**overrides) -> str:
    body = {
        "validated_items": [
            {"item_index": 1, "item_name": "Concrete slab", "quantity_valid": True, "calculation_possible": True},
        ],
        "impossible_calculations": [
            {
                "item_name": "interior doors",
                "reason": "No door schedule",
                "missing_data": ["Door count", "Door sizes"],
                "impact": "high",
            }
        ],
        "summary": {"items_validated": 3, "impossible_calculations": 1},
    }
    body.update(overrides)
    return json.dumps(body)
