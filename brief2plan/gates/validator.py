"""Structural checks for every piece of generated plan data.

Both schemas live as JSON Schema documents in ``brief2plan/schemas``. The
validator fills declared defaults on a copy of the instance, then reports the
most relevant violation as a :class:`ValidationFailure`.
"""
from __future__ import annotations

import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError, best_match

from brief2plan.errors import ValidationFailure
from brief2plan.utils.io import read_text

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"

PLAN_SCHEMA = "plan.schema.json"
USER_STORIES_SCHEMA = "user_stories.schema.json"


def load_schema(name: str) -> Dict:
    return json.loads(read_text(SCHEMAS_DIR / name))


class SchemaValidator:
    def __init__(self, schema: Dict, name: str = "") -> None:
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self.name = name or schema.get("title", "schema")
        self._validator = Draft7Validator(schema)

    @classmethod
    def for_schema(cls, name: str) -> "SchemaValidator":
        return _cached_validator(name)

    def validate(self, instance: Any) -> Any:
        """Return a defaults-filled copy of ``instance`` or raise on the first violation."""
        normalized = _apply_defaults(copy.deepcopy(instance), self.schema)
        error = best_match(self._validator.iter_errors(normalized))
        if error is not None:
            field = _field_path(error)
            raise ValidationFailure(
                f"{self.name} failed {error.validator} at '{field or '<root>'}': {error.message}",
                field=field,
                constraint=str(error.validator),
            )
        return normalized

    def is_valid(self, instance: Any) -> bool:
        try:
            self.validate(instance)
        except ValidationFailure:
            return False
        return True


@lru_cache(maxsize=None)
def _cached_validator(name: str) -> SchemaValidator:
    return SchemaValidator(load_schema(name), name=name)


def plan_validator() -> SchemaValidator:
    return SchemaValidator.for_schema(PLAN_SCHEMA)


def user_stories_validator() -> SchemaValidator:
    return SchemaValidator.for_schema(USER_STORIES_SCHEMA)


def _apply_defaults(instance: Any, schema: Dict) -> Any:
    if isinstance(instance, dict):
        for key, subschema in schema.get("properties", {}).items():
            if key not in instance and "default" in subschema:
                instance[key] = copy.deepcopy(subschema["default"])
            if key in instance:
                instance[key] = _apply_defaults(instance[key], subschema)
    elif isinstance(instance, list) and isinstance(schema.get("items"), dict):
        return [_apply_defaults(item, schema["items"]) for item in instance]
    return instance


def _field_path(error: ValidationError) -> str:
    parts = [str(part) for part in error.absolute_path]
    if error.validator == "required" and isinstance(error.instance, dict):
        # jsonschema reports the parent object; name the missing key instead.
        missing = [key for key in error.validator_value if key not in error.instance]
        if missing:
            parts.append(missing[0])
    return ".".join(parts)
