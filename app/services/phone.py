import re
from typing import Optional

COUNTRY_CODE = "55"
DEFAULT_AREA_CODE = "11"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(value: Optional[str]) -> str:
    """Canonical digits-only form used to compare guest phones with WhatsApp ids.

    Heuristic tuned for Sao Paulo numbers: an 11 digit number starting with the
    area code gets the country code, a bare 10 digit number gets both. Any
    other shape (including 13 digits already starting with 55) is returned as
    plain digits.
    """
    digits = _NON_DIGITS.sub("", value or "")
    if len(digits) == 11 and digits.startswith(DEFAULT_AREA_CODE):
        return f"{COUNTRY_CODE}{digits}"
    if len(digits) == 10:
        return f"{COUNTRY_CODE}{DEFAULT_AREA_CODE}{digits}"
    return digits


def phones_match(left: Optional[str], right: Optional[str]) -> bool:
    normalized = normalize_phone(left)
    return bool(normalized) and normalized == normalize_phone(right)
