# waterbill/extractors/region_parsers.py
from __future__ import annotations
import re
from typing import Dict, Mapping, Optional

from .dates import billing_period
from .fields import DAYS_KEY, PERIOD_KEY
from .patterns import (
    FULL_DATE_RE, JOHOR_ARREARS_RE, JOHOR_CURRENT_BILL_RE, JOHOR_WATER_CHARGE_RE,
    JOHOR_METER_RE, JOHOR_METER_LOOSE_RE, JOHOR_METER_LINE_RE,
    JOHOR_USAGE_RE, JOHOR_USAGE_LOOSE_RE, NS_PERIOD_RE, KEDAH_LABELS, label_amount_re,
)
from .regions import Region
from .utils_amounts import ZERO_AMOUNT, clean_code, first_amount, first_number

RawFields = Mapping[str, str]


def _group_amount(m: Optional[re.Match], default: str = ZERO_AMOUNT) -> str:
    return m.group(1).replace(",", ".") if m else default


class RegionParser:
    """parse(raw OCR fields) -> partial record; never raises on missing data."""

    def parse(self, raw: RawFields) -> Dict[str, str]:
        return dict(raw)


class JohorParser(RegionParser):
    DEPOSIT = "Deposit"
    ARREARS_SECTION = "Tunggakan dan Tarikh Section"
    CURRENT_BILL_SECTION = "Jumlah Bil Semasa Section"
    METER_SECTION = "No Meter, Tarikh, Penggunaan(m3) Section"
    WATER_CHARGE_SECTION = "Jumlah Caj Air Semasa Section"

    def parse(self, raw: RawFields) -> Dict[str, str]:
        out: Dict[str, str] = {}
        out["Deposit"] = first_amount(raw.get(self.DEPOSIT))

        arrears = raw.get(self.ARREARS_SECTION) or ""
        out["Tunggakan"] = _group_amount(JOHOR_ARREARS_RE.search(arrears))
        dates = FULL_DATE_RE.findall(arrears)
        if dates:
            out["Tarikh"] = dates[0]
            if len(dates) >= 2:
                out["Tarikh Tamat"] = dates[1]

        current = raw.get(self.CURRENT_BILL_SECTION)
        if current:
            out["Jumlah Bil Semasa"] = _group_amount(JOHOR_CURRENT_BILL_RE.search(current))

        out["No. Bil"] = clean_code(raw.get("No. Bil"))
        out["No. Akaun"] = clean_code(raw.get("No. Akaun"))

        meter_block = raw.get(self.METER_SECTION) or ""
        if meter_block:
            out.update(self._meter_usage_period(meter_block))

        charge = raw.get(self.WATER_CHARGE_SECTION)
        if charge:
            out["Jumlah Caj Air Semasa"] = _group_amount(JOHOR_WATER_CHARGE_RE.search(charge), "")
        if not out.get("Jumlah Caj Air Semasa"):
            out["Jumlah Caj Air Semasa"] = out.get("Jumlah Bil Semasa") or ZERO_AMOUNT
        return out

    @staticmethod
    def _meter_usage_period(block: str) -> Dict[str, str]:
        out: Dict[str, str] = {}
        # meter numbers are printed with stray spaces, e.g. "SAJ22A 131046"
        m = JOHOR_METER_RE.search(block) or JOHOR_METER_LOOSE_RE.search(block)
        out["No. Meter"] = re.sub(r"\s+", "", m.group(1)) if m else ""

        meter_line = next((l for l in block.split("\n") if JOHOR_METER_LINE_RE.search(l)), block)
        usage = JOHOR_USAGE_RE.search(meter_line)
        if usage:
            val = re.sub(r"\s+", "", usage.group(1)).replace(",", ".")
            out["Penggunaan (m3)"] = val if "." in val else val + ".00"
        else:
            out["Penggunaan (m3)"] = _group_amount(JOHOR_USAGE_LOOSE_RE.search(block))

        # the block lists the current reading date first
        dates = FULL_DATE_RE.findall(block)
        if len(dates) >= 2:
            period = billing_period(dates[1], dates[0])
            if period:
                out[PERIOD_KEY], out[DAYS_KEY] = period
        return out


class KedahParser(RegionParser):
    SUMMARY_SECTION = "Jumlah Caj Semasa, Jumlah Tunggakan dan Jumlah Perlu Dibayar Section"

    def parse(self, raw: RawFields) -> Dict[str, str]:
        summary = raw.get(self.SUMMARY_SECTION) or ""
        out = {
            "Nombor Akaun": raw.get("No. Akaun") or "",
            "No. Invois": raw.get("No. Bil") or "",
            "Tarikh": raw.get("Tarikh") or "",
            "Tempoh Bil": raw.get(PERIOD_KEY) or "",
            "Bilangan Hari": raw.get(DAYS_KEY) or "",
            "Nombor Meter": raw.get("No. Meter") or "",
            "Penggunaan Semasa": raw.get("Penggunaan Semasa") or "",
            "Cagaran": raw.get("Cagaran") or ZERO_AMOUNT,
        }
        for key, label in KEDAH_LABELS.items():
            out[key] = _group_amount(label_amount_re(label).search(summary))
        return out


class NegeriSembilanParser(RegionParser):
    PERIOD_SECTION = "Bilangan Hari Section"

    def parse(self, raw: RawFields) -> Dict[str, str]:
        out: Dict[str, str] = {
            "No. Akaun": raw.get("No. Akaun") or "",
            "No. Invois": raw.get("No. Bil") or "",
        }
        # 09-08-2025 / 09.08.2025 -> 09/08/2025
        tarikh = raw.get("Tarikh") or ""
        out["Tarikh"] = re.sub(r"\s+", "", re.sub(r"[.\-]", "/", tarikh))

        m = NS_PERIOD_RE.search(raw.get(self.PERIOD_SECTION) or "")
        period = billing_period(m.group(1), m.group(2)) if m else None
        if period is None and raw.get(PERIOD_KEY) and raw.get(DAYS_KEY):
            period = (raw[PERIOD_KEY], raw[DAYS_KEY])
        if period:
            out[PERIOD_KEY], out[DAYS_KEY] = period

        out["Penggunaan"] = first_number(raw.get("Penggunaan"), "0")
        out["Deposit"] = first_amount(raw.get("Deposit"))

        out["No. Meter"] = raw.get("No. Meter") or ""
        out["Caj Semasa"] = raw.get("Caj Semasa") or ZERO_AMOUNT
        out["Tunggakan"] = raw.get("Tunggakan") or ZERO_AMOUNT
        out["Jumlah Perlu Dibayar"] = raw.get("Jumlah Perlu Dibayar") or ZERO_AMOUNT
        return out


PASSTHROUGH = RegionParser()

PARSERS: Dict[Region, RegionParser] = {
    Region.JOHOR: JohorParser(),
    Region.KEDAH: KedahParser(),
    Region.NEGERI_SEMBILAN: NegeriSembilanParser(),
    Region.SELANGOR: PASSTHROUGH,
    Region.SELANGOR2: PASSTHROUGH,
    Region.MELAKA: PASSTHROUGH,
}


def parser_for(region: Region) -> RegionParser:
    return PARSERS.get(region, PASSTHROUGH)


def parse_fields(region: Region, raw: RawFields) -> Dict[str, str]:
    return parser_for(region).parse(raw)
