# waterbill/extractors/utils_amounts.py
from __future__ import annotations
import re
from typing import Any, Optional

from .patterns import (
    CURRENCY_PREFIX_RE, NON_NUMERIC_RE, NON_TEXT_RE,
    FIRST_AMOUNT_RE, FIRST_NUMBER_RE, ACCOUNT_JUNK_RE,
)

ZERO_AMOUNT = "0.00"

_UNIT_RE = re.compile(r"m\s*[3³]", re.IGNORECASE)
_DECIMAL_TAIL_RE = re.compile(r"[.,](\d{1,2})$")
_SEPARATORS_RE = re.compile(r"[.,]")


def clean_numeric(value: Any) -> str:
    """
    Canonical amount string: [-]digits[.digits].
    The right-most separator followed by 1-2 digits is the decimal point,
    every other '.' or ',' is a thousands mark, except a lone separator after
    a zero whole part ("0.125"). No digits -> "0.00".
    """
    if value is None:
        return ZERO_AMOUNT
    s = str(value)
    s = CURRENCY_PREFIX_RE.sub("", s)
    s = _UNIT_RE.sub("", s)
    s = NON_NUMERIC_RE.sub("", s)
    negative = s.startswith("-")
    s = s.replace("-", "").rstrip(".,")
    if not any(ch.isdigit() for ch in s):
        return ZERO_AMOUNT

    m = _DECIMAL_TAIL_RE.search(s)
    parts = _SEPARATORS_RE.split(s)
    if m:
        whole = _SEPARATORS_RE.sub("", s[:m.start()]) or "0"
        out = f"{whole}.{m.group(1)}"
    elif len(parts) == 2 and parts[0].strip("0") == "":
        # "0.125", ".5": no thousands group can start with zero
        out = f"0.{parts[1]}"
    else:
        out = _SEPARATORS_RE.sub("", s)
    return f"-{out}" if negative else out


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = NON_TEXT_RE.sub("", str(value).strip()).strip()
    return s or None


def first_amount(text: Optional[str], default: str = ZERO_AMOUNT) -> str:
    m = FIRST_AMOUNT_RE.search(text or "")
    return m.group(1).replace(",", ".") if m else default


def first_number(text: Optional[str], default: str = "0") -> str:
    m = FIRST_NUMBER_RE.search(text or "")
    return m.group(1).replace(",", ".") if m else default


def clean_code(text: Optional[str]) -> str:
    # account / invoice numbers: no whitespace, alphanumerics and hyphens only
    return ACCOUNT_JUNK_RE.sub("", re.sub(r"\s+", "", text or ""))
