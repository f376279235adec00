import unittest

from waterbill.extractors.utils_amounts import (
    clean_code, clean_numeric, clean_text, first_amount, first_number,
)


class TestCleanNumeric(unittest.TestCase):
    def test_currency_prefix_and_decimal_comma(self) -> None:
        self.assertEqual(clean_numeric("RM 1.234,56"), "1234.56")
        self.assertEqual(clean_numeric("rm1,234.56"), "1234.56")
        self.assertEqual(clean_numeric("RM45,6"), "45.6")

    def test_thousands_only(self) -> None:
        self.assertEqual(clean_numeric("1,234"), "1234")
        self.assertEqual(clean_numeric("1.234.567"), "1234567")

    def test_empty_or_missing_is_zero(self) -> None:
        for value in (None, "", "   ", "RM", "abc", "-", "."):
            self.assertEqual(clean_numeric(value), "0.00", msg=repr(value))

    def test_keeps_leading_minus(self) -> None:
        self.assertEqual(clean_numeric("RM -12.50"), "-12.50")

    def test_strips_cubic_metre_unit(self) -> None:
        self.assertEqual(clean_numeric("184 m3"), "184")
        self.assertEqual(clean_numeric("27.5m³"), "27.5")

    def test_leading_separator(self) -> None:
        self.assertEqual(clean_numeric(".50"), "0.50")

    def test_zero_whole_part_keeps_decimal(self) -> None:
        self.assertEqual(clean_numeric("0.125"), "0.125")
        self.assertEqual(clean_numeric("RM 0,125"), "0.125")
        self.assertEqual(clean_numeric(".125 m3"), "0.125")
        self.assertEqual(clean_numeric("-0.125"), "-0.125")

    def test_idempotent(self) -> None:
        for value in ("RM 1.234,56", "184 m3", "-3,5", "", "12.345", "0.00", "0.125"):
            once = clean_numeric(value)
            self.assertEqual(clean_numeric(once), once, msg=repr(value))


class TestTextHelpers(unittest.TestCase):
    def test_clean_text(self) -> None:
        self.assertEqual(clean_text("  Jane #Doe  "), "Jane Doe")
        self.assertEqual(clean_text("05/03/2024 - 04/04/2024"), "05/03/2024 - 04/04/2024")
        self.assertIsNone(clean_text("@@"))
        self.assertIsNone(clean_text(""))
        self.assertIsNone(clean_text(None))

    def test_first_amount(self) -> None:
        self.assertEqual(first_amount("CAGARAN RM 50,00"), "50.00")
        self.assertEqual(first_amount("tiada"), "0.00")
        self.assertEqual(first_amount(None), "0.00")

    def test_first_number(self) -> None:
        self.assertEqual(first_number("25 m3"), "25")
        self.assertEqual(first_number("12,345 m3"), "12.345")
        self.assertEqual(first_number(""), "0")

    def test_clean_code(self) -> None:
        self.assertEqual(clean_code("B 1234-567 8"), "B1234-5678")
        self.assertEqual(clean_code("AC: 0012 3456"), "AC00123456")
        self.assertEqual(clean_code(None), "")


if __name__ == "__main__":
    unittest.main()
