"""Typed parsing of multipart form fields."""
import math
from typing import List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from handwerk.errors import ValidationError
from handwerk.models import CHANNELS

_ID_LIST = TypeAdapter(List[int])
_URL_LIST = TypeAdapter(List[str])


def parse_id_list(raw: Optional[str], field: str) -> Optional[List[int]]:
    """``'[1, 2]'`` -> ``[1, 2]``; ``None`` when the field was not sent."""
    if raw is None or raw.strip() == "":
        return None
    try:
        return _ID_LIST.validate_json(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"{field} must be a JSON list of ids") from exc


def parse_url_list(raw: Optional[str], field: str) -> Optional[List[str]]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return _URL_LIST.validate_json(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"{field} must be a JSON list of strings") from exc


def parse_price(raw: Optional[str]) -> Optional[float]:
    """Empty or non-numeric prices are stored as no price."""
    value = (raw or "").strip()
    if not value:
        return None
    try:
        price = float(value)
    except ValueError:
        return None
    return price if math.isfinite(price) else None


def parse_flag(raw: Optional[str], field: str) -> Optional[bool]:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in ("true", "1", "on", "yes"):
        return True
    if value in ("false", "0", "off", "no", ""):
        return False
    raise ValidationError(f"{field} must be true or false")


def parse_craft_type(raw: Optional[str]) -> Optional[str]:
    value = (raw or "").strip()
    if not value:
        return None
    if value not in CHANNELS:
        raise ValidationError(f"type must be one of: {', '.join(CHANNELS)}")
    return value
