# waterbill/extractors/patterns.py
from __future__ import annotations
import re

# ---- region keywords (phase 1 is tested in this order, first hit wins)
SELANGOR_RE = re.compile(r"air\s*selangor")
MELAKA_RE = re.compile(r"syarikat\s*air\s*melaka|\bsamb\b")
NEGERI_SEMBILAN_RE = re.compile(r"syarikat\s*air\s*negeri\s*sembilan|\bsains\b")
KEDAH_RE = re.compile(r"syarikat\s*air\s*darul\s*aman|\bsada\b")
JOHOR_FRAGMENTS = ("ranhill", "saj", "ranhill saj", "darul ta'zim", "johor")

# header/footer OCR probe, narrower than the text-layer test
JOHOR_PROBE_RE = re.compile(
    r"ranhill|saj\s+sdn|saj\s+holdings|saj\s+berhad|darul\s+ta'?zim|johor"
    r"|bil\s+air\s+ranhill|ranhill\s+utilities"
)

SELANGOR2_MARKERS = ("baharu", "lama")

# ---- address
ADDRESS_STOP_WORDS = (
    "selangor", "kuala lumpur", "putrajaya", "labuan",
    "johor", "kedah", "kelantan", "melaka", "malacca", "negeri sembilan",
    "pahang", "perak", "perlis", "pulau pinang", "penang", "sabah",
    "sarawak", "terengganu",
)

# ---- dates / amounts
DATE_TOKEN_RE = re.compile(r"(?<!\d)(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4}|\d{2})(?!\d)")
FULL_DATE_RE = re.compile(r"\d{2}[/\-]\d{2}[/\-]\d{4}")
CURRENCY_PREFIX_RE = re.compile(r"rm\s*", re.IGNORECASE)
NON_NUMERIC_RE = re.compile(r"[^\d.,\-]")
NON_TEXT_RE = re.compile(r"[^\w\s/\-.,]")
FIRST_AMOUNT_RE = re.compile(r"(\d+(?:[.,]\d{1,2})?)")
FIRST_NUMBER_RE = re.compile(r"(\d+(?:[.,]\d+)?)")

# ---- Johor
JOHOR_ARREARS_RE = re.compile(
    r"TUNGGAKAN(?:\s+\d{2}/\d{2}/\d{2,4})?(?:\s+[A-Z0-9/]+)?\s+([0-9]+(?:[.,][0-9]{1,2})?)",
    re.IGNORECASE,
)
JOHOR_CURRENT_BILL_RE = re.compile(
    r"JUMLAH\s+BIL\s+SEMASA[^0-9]*([0-9]+(?:[.,][0-9]{1,2})?)", re.IGNORECASE
)
JOHOR_WATER_CHARGE_RE = re.compile(
    r"JUMLAH\s+CAJ\s+AIR\s+SEMASA[^0-9]*([0-9]+(?:[.,][0-9]{1,2})?)", re.IGNORECASE
)
JOHOR_METER_RE = re.compile(r"(SAJ\s*[0-9A-Z]+\s*[0-9A-Z]*)", re.IGNORECASE)
JOHOR_METER_LOOSE_RE = re.compile(r"(S[A-Z0-9]{3,}\s*[0-9A-Z]+)", re.IGNORECASE)
JOHOR_METER_LINE_RE = re.compile(r"SAJ", re.IGNORECASE)
JOHOR_USAGE_RE = re.compile(r"(\d{1,5}(?:[.,\s]\d{1,2})?)\s*(?:m3|$)", re.IGNORECASE)
JOHOR_USAGE_LOOSE_RE = re.compile(r"(\d{2,4}(?:[.,]\d{1,2})?)\s*(?:m3|$)", re.IGNORECASE)
ACCOUNT_JUNK_RE = re.compile(r"[^A-Za-z0-9\-]")

# ---- Negeri Sembilan
NS_PERIOD_RE = re.compile(
    r"TEMPOH\s+BIL\s+SEMASA\s*[:\-]?\s*(\d{1,2}[/\-]\d{1,2}[/\-]\d{4})"
    r".*?(?:HINGGA|TO)\s*(\d{1,2}[/\-]\d{1,2}[/\-]\d{4})",
    re.IGNORECASE | re.DOTALL,
)

# ---- Kedah summary labels
KEDAH_LABELS = {
    "Jumlah Caj Semasa": "JUMLAH CAJ SEMASA",
    "Jumlah Tunggakan": "JUMLAH TUNGGAKAN",
    "Jumlah Perlu Dibayar": "JUMLAH PERLU DIBAYAR",
}


def label_amount_re(label: str) -> re.Pattern:
    words = r"\s+".join(re.escape(w) for w in label.split())
    return re.compile(words + r"[^0-9]*([0-9]+(?:[.,][0-9]{1,2})?)", re.IGNORECASE)
