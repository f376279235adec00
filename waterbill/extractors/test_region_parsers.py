import unittest

from waterbill.extractors.region_parsers import (
    PASSTHROUGH, JohorParser, KedahParser, NegeriSembilanParser, parse_fields, parser_for,
)
from waterbill.extractors.regions import Region


class TestJohorParser(unittest.TestCase):
    RAW = {
        "Deposit": "CAGARAN RM 50.00",
        "Tunggakan dan Tarikh Section": "TUNGGAKAN 12.30\nTARIKH BIL 05/08/2025 TARIKH AKHIR 19/08/2025",
        "Jumlah Bil Semasa Section": "JUMLAH BIL SEMASA RM 45,60",
        "No. Bil": "B 1234-567 8",
        "No. Akaun": "AC: 0012 3456",
        "No Meter, Tarikh, Penggunaan(m3) Section":
            "NO METER TARIKH BACAAN\nSAJ22A 131046 31/07/2025 184.00\n01/07/2025",
        "Jumlah Caj Air Semasa Section": "",
    }

    def test_full_block_set(self) -> None:
        out = JohorParser().parse(self.RAW)
        self.assertEqual(out["Deposit"], "50.00")
        self.assertEqual(out["Tunggakan"], "12.30")
        self.assertEqual(out["Tarikh"], "05/08/2025")
        self.assertEqual(out["Tarikh Tamat"], "19/08/2025")
        self.assertEqual(out["Jumlah Bil Semasa"], "45.60")
        self.assertEqual(out["No. Bil"], "B1234-5678")
        self.assertEqual(out["No. Akaun"], "AC00123456")
        self.assertEqual(out["No. Meter"], "SAJ22A131046")
        self.assertEqual(out["Penggunaan (m3)"], "184.00")
        # end date is printed first
        self.assertEqual(out["Tempoh Bil"], "01/07/2025 - 31/07/2025")
        self.assertEqual(out["Bilangan Hari"], "30")
        self.assertEqual(out["Jumlah Caj Air Semasa"], "45.60")

    def test_water_charge_block_wins_when_present(self) -> None:
        raw = dict(self.RAW, **{"Jumlah Caj Air Semasa Section": "JUMLAH CAJ AIR SEMASA 40.10"})
        self.assertEqual(JohorParser().parse(raw)["Jumlah Caj Air Semasa"], "40.10")

    def test_usage_without_decimals_gets_two(self) -> None:
        raw = {"No Meter, Tarikh, Penggunaan(m3) Section": "SAJ 9981 184 m3"}
        out = JohorParser().parse(raw)
        self.assertEqual(out["Penggunaan (m3)"], "184.00")
        self.assertNotIn("Tempoh Bil", out)

    def test_loose_meter_pattern(self) -> None:
        raw = {"No Meter, Tarikh, Penggunaan(m3) Section": "S1X22 4410 12.5 m3"}
        self.assertEqual(JohorParser().parse(raw)["No. Meter"], "S1X224410")

    def test_empty_input_has_defaults(self) -> None:
        out = JohorParser().parse({})
        self.assertEqual(out["Deposit"], "0.00")
        self.assertEqual(out["Tunggakan"], "0.00")
        self.assertEqual(out["Jumlah Caj Air Semasa"], "0.00")
        self.assertEqual(out["No. Bil"], "")
        self.assertNotIn("No. Meter", out)


class TestKedahParser(unittest.TestCase):
    SUMMARY = "Jumlah Caj Semasa, Jumlah Tunggakan dan Jumlah Perlu Dibayar Section"

    def test_summary_block(self) -> None:
        raw = {
            self.SUMMARY: "JUMLAH CAJ SEMASA RM 30.50\nJUMLAH TUNGGAKAN\nRM 5,00\nJUMLAH PERLU DIBAYAR RM35.50",
            "No. Akaun": "0101",
            "No. Bil": "K-77",
            "Tempoh Bil": "01/07/2025 - 31/07/2025",
            "Bilangan Hari": "30",
        }
        out = KedahParser().parse(raw)
        self.assertEqual(out["Jumlah Caj Semasa"], "30.50")
        self.assertEqual(out["Jumlah Tunggakan"], "5.00")
        self.assertEqual(out["Jumlah Perlu Dibayar"], "35.50")
        self.assertEqual(out["Nombor Akaun"], "0101")
        self.assertEqual(out["No. Invois"], "K-77")
        self.assertEqual(out["Tempoh Bil"], "01/07/2025 - 31/07/2025")
        self.assertEqual(out["Cagaran"], "0.00")

    def test_missing_labels_default(self) -> None:
        out = KedahParser().parse({self.SUMMARY: "JUMLAH CAJ SEMASA 12.00"})
        self.assertEqual(out["Jumlah Caj Semasa"], "12.00")
        self.assertEqual(out["Jumlah Tunggakan"], "0.00")
        self.assertEqual(out["Jumlah Perlu Dibayar"], "0.00")
        self.assertEqual(out["Nombor Meter"], "")


class TestNegeriSembilanParser(unittest.TestCase):
    def test_period_and_cleanup(self) -> None:
        raw = {
            "Tarikh": "09-08-2025",
            "Bilangan Hari Section": "TEMPOH BIL SEMASA : 1-7-2025 HINGGA 31/7/2025",
            "Penggunaan": "25 m3",
            "Deposit": "RM100,00",
            "No. Bil": "NS-1",
            "Caj Semasa": "20.00",
        }
        out = NegeriSembilanParser().parse(raw)
        self.assertEqual(out["Tarikh"], "09/08/2025")
        self.assertEqual(out["Tempoh Bil"], "01/07/2025 - 31/07/2025")
        self.assertEqual(out["Bilangan Hari"], "30")
        self.assertEqual(out["Penggunaan"], "25")
        self.assertEqual(out["Deposit"], "100.00")
        self.assertEqual(out["No. Invois"], "NS-1")
        self.assertEqual(out["Caj Semasa"], "20.00")
        self.assertEqual(out["Tunggakan"], "0.00")

    def test_defaults(self) -> None:
        out = NegeriSembilanParser().parse({})
        self.assertEqual(out["Penggunaan"], "0")
        self.assertEqual(out["Deposit"], "0.00")
        self.assertEqual(out["Tarikh"], "")
        self.assertNotIn("Tempoh Bil", out)
        self.assertNotIn("Bilangan Hari", out)

    def test_falls_back_to_template_dates(self) -> None:
        out = NegeriSembilanParser().parse({"Tempoh Bil": "01/07/2025 - 31/07/2025", "Bilangan Hari": "30"})
        self.assertEqual(out["Bilangan Hari"], "30")


class TestDispatch(unittest.TestCase):
    def test_parser_per_region(self) -> None:
        self.assertIsInstance(parser_for(Region.JOHOR), JohorParser)
        self.assertIsInstance(parser_for(Region.KEDAH), KedahParser)
        self.assertIsInstance(parser_for(Region.NEGERI_SEMBILAN), NegeriSembilanParser)
        for region in (Region.SELANGOR, Region.SELANGOR2, Region.MELAKA):
            self.assertIs(parser_for(region), PASSTHROUGH)

    def test_passthrough_copies(self) -> None:
        raw = {"No. Akaun": "1", "Bil Semasa": "2.00"}
        out = parse_fields(Region.MELAKA, raw)
        self.assertEqual(out, raw)
        self.assertIsNot(out, raw)


if __name__ == "__main__":
    unittest.main()
