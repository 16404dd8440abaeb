"""Tests for number parsing and formatting."""

import pytest

from fence_admin.numbering.formats import JobInvoiceNumbers, NumberFormat, next_value, quote_prefix_for

fmt = NumberFormat(prefix="PVC-", min_width=3)


class TestLeadNumbers:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(1, "PVC-001"), (42, "PVC-042"), (999, "PVC-999"), (1000, "PVC-1000"), (123456, "PVC-123456")],
    )
    def test_format_pads_without_truncating(self, value, expected):
        assert fmt.format_lead_number(value) == expected

    def test_format_rejects_non_positive(self):
        with pytest.raises(ValueError):
            fmt.format_lead_number(0)

    @pytest.mark.parametrize(
        ("number", "expected"),
        [("PVC-001", 1), ("PVC-999", 999), ("PVC-1000", 1000), ("PVC-12", 12), ("PVC-0007", 7)],
    )
    def test_parse_suffix(self, number, expected):
        assert fmt.parse_lead_suffix(number) == expected

    @pytest.mark.parametrize(
        "number",
        [None, "", "not-a-number", "PVC-", "PVC-12a", "LEAD-001", "pvc-001", "PVC-001-Q1", "PVC-001\n", "PVC-١٢"],
    )
    def test_parse_suffix_rejects_malformed(self, number):
        assert fmt.parse_lead_suffix(number) is None
        assert not fmt.is_valid_lead_number(number)

    def test_custom_prefix_and_width(self):
        custom = NumberFormat(prefix="FEN/", min_width=5)
        assert custom.format_lead_number(7) == "FEN/00007"
        assert custom.parse_lead_suffix("FEN/00007") == 7
        assert custom.parse_lead_suffix("PVC-007") is None


class TestQuoteNumbers:
    def test_format(self):
        assert fmt.format_quote_number("PVC-005", 1) == "PVC-005-Q1"
        assert fmt.format_quote_number("PVC-005", 12) == "PVC-005-Q12"

    def test_parse_sequence(self):
        assert fmt.parse_quote_sequence("PVC-005", "PVC-005-Q3") == 3
        assert fmt.parse_quote_sequence("PVC-005", "PVC-005-Q10") == 10

    @pytest.mark.parametrize("quote_number", ["PVC-005-Q", "PVC-005-Qx", "PVC-006-Q1", "PVC-0051-Q1", "PVC-005-JOB"])
    def test_parse_sequence_rejects_foreign(self, quote_number):
        assert fmt.parse_quote_sequence("PVC-005", quote_number) is None

    def test_quote_prefix(self):
        assert quote_prefix_for("PVC-005") == "PVC-005-Q"


class TestJobAndInvoiceNumbers:
    def test_derived_from_lead(self):
        assert fmt.derive_job_and_invoice_numbers("PVC-007") == JobInvoiceNumbers("PVC-007-JOB", "PVC-007-INV")

    def test_wide_lead_number(self):
        numbers = fmt.derive_job_and_invoice_numbers("PVC-1000")
        assert numbers.job_number == "PVC-1000-JOB"
        assert numbers.invoice_number == "PVC-1000-INV"


class TestNextValue:
    def test_empty_starts_at_one(self):
        assert next_value([]) == 1

    def test_ignores_malformed(self):
        assert next_value([None, 3, None, 1]) == 4

    def test_uses_integer_comparison(self):
        assert next_value([998, 999, 1000]) == 1001
