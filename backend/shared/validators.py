"""Validation helpers for relay settings loaded from the environment."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from pydantic_settings import EnvSettingsSource

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

_STRING_LIST_FIELDS = {"cors_origins"}


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_json_list(value: str) -> list[str]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON array: {e}") from e
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ValueError("JSON value must be an array of strings")
    return parsed


def parse_string_list(value: str | list[str]) -> list[str]:
    """Parse a non-empty string list such as CORS origins.

    Accepts a list (returned as-is), a JSON array string ('["a","b"]')
    or a comma-separated string ('a,b'). Raises ValueError when the
    result would be empty or the JSON is malformed.
    """
    if isinstance(value, list):
        result = value
    else:
        stripped = value.strip()
        result = _parse_json_list(stripped) if stripped.startswith("[") else _split_csv(stripped)

    if not result:
        raise ValueError("String list value must not be empty")
    return result


class StringListEnvSettingsSource(EnvSettingsSource):
    """Env settings source that hands string-list fields to validators as raw strings.

    pydantic-settings JSON-decodes list fields from env vars before validators
    run, which rejects the comma-separated form. Skipping that step lets
    parse_string_list handle both forms.
    """

    def prepare_field_value(
        self,
        field_name: str,
        field: FieldInfo,
        value: Any,  # noqa: ANN401
        value_is_complex: bool,  # noqa: FBT001
    ) -> Any:  # noqa: ANN401
        if field_name in _STRING_LIST_FIELDS and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)
