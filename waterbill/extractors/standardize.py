# waterbill/extractors/standardize.py
from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Tuple

from .utils_amounts import clean_numeric, clean_text

# canonical key -> historical spellings, first non-empty wins
TEXT_FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("File_Name", ("File Name", "File_Name")),
    ("Region", ("Region",)),
    ("No_Invois", ("No. Invois", "No. Bil", "No_Invois", "No_Bil")),
    ("No_Akaun", ("No. Akaun", "Nombor Akaun", "Nombor_Akaun", "No_Akaun")),
    ("Tarikh", ("Tarikh",)),
    ("Tempoh_Bil", ("Tempoh Bil", "Tempoh_Bil")),
    ("Bilangan_Hari", ("Bilangan Hari", "Bilangan_Hari")),
    ("No_Meter", ("No. Meter", "Nombor Meter", "Nombor_Meter", "No_Meter")),
)

NUMERIC_FIELDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Penggunaan", ("Penggunaan", "Penggunaan (m3)", "Penggunaan Semasa")),
    ("Caj_Semasa", ("Caj Semasa", "Jumlah Bil Semasa", "Jumlah Caj Semasa",
                    "Jumlah Caj Air Semasa", "Bil Semasa", "Caj_Semasa")),
    ("Tunggakan", ("Tunggakan", "Jumlah Tunggakan", "Baki Terdahulu")),
    ("Jumlah_Perlu_Dibayar", ("Jumlah Perlu Dibayar", "Jumlah_Perlu_Dibayar")),
    ("Deposit", ("Deposit", "Cagaran")),
)

CANONICAL_KEYS = tuple(k for k, _ in TEXT_FIELDS) + tuple(k for k, _ in NUMERIC_FIELDS)


def _pick(data: Mapping[str, Any], keys: Tuple[str, ...]) -> Optional[Any]:
    for k in keys:
        v = data.get(k)
        if v not in (None, ""):
            return v
    return None


def standardize(data: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    """
    Any provider record -> the fixed output schema. Text fields are None when
    empty, numeric fields "0.00". Running it twice changes nothing.
    """
    out: Dict[str, Optional[str]] = {}
    for key, variants in TEXT_FIELDS:
        value = _pick(data, variants)
        if key == "Tarikh" and value is not None:
            value = str(value).replace("-", "/")
        out[key] = clean_text(value)
    for key, variants in NUMERIC_FIELDS:
        out[key] = clean_numeric(_pick(data, variants))
    return out
