from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any

from django.db import models
from django.utils.dateparse import parse_date, parse_datetime


class SettingType(models.TextChoices):
    BOOLEAN = "boolean", "Boolean"
    INTEGER = "integer", "Integer"
    FLOAT = "float", "Float"
    DATE = "date", "Date"
    STRING = "string", "String"
    # Same as STRING, edited with a multi-line input.
    TEXT = "text", "Text"


TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class GadgetSetting:
    """A named, typed and defaulted configuration field of a gadget."""

    name: str
    title: str
    type: SettingType = SettingType.STRING
    default: Any = None

    def __post_init__(self):
        try:
            setting_type = SettingType(self.type)
        except ValueError:
            raise ValueError(
                f"Setting {self.name!r} has unknown type {self.type!r}. "
                f"Expected one of: {', '.join(SettingType.values)}."
            ) from None
        object.__setattr__(self, "type", setting_type)


def _to_boolean(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return bool(raw)
    text = str(raw).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {raw!r}")


def _to_integer(raw) -> int:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not number.is_integer():
            raise
        return int(number)


def _to_float(raw) -> float:
    return float(str(raw).strip()) if isinstance(raw, str) else float(raw)


def _to_date(raw) -> datetime.date:
    if isinstance(raw, datetime.datetime):
        return raw.date()
    if isinstance(raw, datetime.date):
        return raw
    text = str(raw).strip()
    parsed = parse_datetime(text)
    if parsed is not None:
        return parsed.date()
    parsed_date = parse_date(text)
    if parsed_date is None:
        raise ValueError(f"Invalid date value: {raw!r}")
    return parsed_date


_COERCERS = {
    SettingType.BOOLEAN: _to_boolean,
    SettingType.INTEGER: _to_integer,
    SettingType.FLOAT: _to_float,
    SettingType.DATE: _to_date,
    SettingType.STRING: str,
    SettingType.TEXT: str,
}


def coerce_value(setting_type, raw):
    """Convert a stored raw value into the Python type of ``setting_type``.

    ``None`` stays ``None``. Empty strings are ``None`` for every kind except
    string and text. Raises ``ValueError`` when ``raw`` cannot be parsed.
    """
    setting_type = SettingType(setting_type)
    if raw is None:
        return None
    if setting_type not in (SettingType.STRING, SettingType.TEXT):
        if isinstance(raw, str) and not raw.strip():
            return None
    return _COERCERS[setting_type](raw)


def serialize_value(setting_type, value) -> str:
    """Inverse of :func:`coerce_value`, producing the stored text form."""
    setting_type = SettingType(setting_type)
    if value is None:
        return ""
    if setting_type == SettingType.BOOLEAN:
        return "1" if value else "0"
    if setting_type == SettingType.DATE:
        return _to_date(value).isoformat()
    return str(value)
