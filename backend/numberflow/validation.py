from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from numberflow.time_utils import parse_loose_date


MOBILE_RE = re.compile(r"^\d{10}$")

# Upper bound for any price column (Numeric(12, 2))
MAX_PRICE = 9_999_999_999.99


class ValidationError(ValueError):
    """
    400-level input problem.

    `fields` maps each offending field to a message so forms can show them
    inline; `str(err)` is a one-line summary.
    """

    def __init__(self, fields: dict[str, str] | str):
        if isinstance(fields, str):
            fields = {"_": fields}
        self.fields = dict(fields)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.fields.items()))

    def to_dict(self) -> dict:
        return {"error": "Validation failed", "fields": self.fields}


@dataclass
class PayloadReader:
    """
    Collects per-field errors while reading a JSON payload, then raises
    them together.

        reader = PayloadReader(data)
        mobile = reader.mobile("mobile")
        price = reader.price("purchase_price")
        reader.raise_if_errors()
    """
    data: dict
    errors: dict = field(default_factory=dict)

    def _raw(self, key: str):
        value = self.data.get(key)
        if isinstance(value, str):
            value = value.strip()
        return value

    def _missing(self, value) -> bool:
        return value is None or value == ""

    def text(self, key: str, *, required: bool = True, default: str | None = None, max_length: int = 255) -> str | None:
        value = self._raw(key)
        if self._missing(value):
            if required:
                self.errors[key] = f"{key} is required"
            return default
        value = str(value)
        if len(value) > max_length:
            self.errors[key] = f"{key} must be at most {max_length} characters"
        return value

    def mobile(self, key: str = "mobile") -> str | None:
        value = self._raw(key)
        if self._missing(value):
            self.errors[key] = f"{key} is required"
            return None
        value = str(value)
        if not MOBILE_RE.match(value):
            self.errors[key] = "Mobile number must be exactly 10 digits"
            return None
        return value

    def price(self, key: str, *, required: bool = True, default: float | None = None) -> float | None:
        value = self._raw(key)
        if self._missing(value):
            if required:
                self.errors[key] = f"{key} is required"
            return default
        if isinstance(value, bool):
            self.errors[key] = f"{key} must be a number"
            return None
        try:
            amount = float(value)
        except (TypeError, ValueError):
            self.errors[key] = f"{key} must be a number"
            return None
        if amount != amount or amount < 0:
            self.errors[key] = f"{key} must be zero or more"
            return None
        if amount > MAX_PRICE:
            self.errors[key] = f"{key} is too large"
            return None
        return amount

    def choice(self, key: str, choices, *, required: bool = True, default: str | None = None) -> str | None:
        value = self._raw(key)
        if self._missing(value):
            if required:
                self.errors[key] = f"{key} is required"
            return default
        if value not in choices:
            self.errors[key] = f"{key} must be one of: {', '.join(choices)}"
            return None
        return value

    def date(self, key: str, *, required: bool = True) -> datetime | None:
        value = self._raw(key)
        if self._missing(value):
            if required:
                self.errors[key] = f"{key} is required"
            return None
        parsed = parse_loose_date(value)
        if parsed is None:
            self.errors[key] = f"{key} must be a valid date"
        return parsed

    def id_list(self, key: str) -> list[int]:
        value = self.data.get(key)
        if not isinstance(value, list) or not value:
            self.errors[key] = f"{key} must be a non-empty list of ids"
            return []
        ids = []
        for item in value:
            if isinstance(item, bool) or not isinstance(item, int):
                self.errors[key] = f"{key} must contain integer ids"
                return []
            ids.append(item)
        return ids

    def raise_if_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)


def require_json_object(data: Any) -> dict:
    if not isinstance(data, dict):
        raise ValidationError({"_": "Request body must be a JSON object"})
    return data
