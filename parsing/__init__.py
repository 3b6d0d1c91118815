"""Response parsing: extract and repair JSON from free-text model output."""

from .json_repair import extract_json, repair_json, parse_model_json

__all__ = [
    "extract_json",
    "repair_json",
    "parse_model_json",
]
