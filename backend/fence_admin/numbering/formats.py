"""Parsing and formatting of lead, quote, job and invoice numbers.

Lead numbers are ``{prefix}{n}`` with ``n`` zero-padded to ``min_width``
digits (never truncated, so ``PVC-999`` is followed by ``PVC-1000``).
Every other number hangs off its lead number:

    PVC-005        lead
    PVC-005-Q3     third quote of the lead
    PVC-005-JOB    the lead's job
    PVC-005-INV    the job's invoice

Parsers return ``None`` for malformed or foreign values instead of raising,
so legacy identifiers in the same table are skipped by max computations.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import cached_property
from typing import NamedTuple

from fence_admin.config import settings

QUOTE_MARKER = "-Q"
JOB_SUFFIX = "-JOB"
INVOICE_SUFFIX = "-INV"


class JobInvoiceNumbers(NamedTuple):
    """Job and invoice numbers derived from one lead number."""

    job_number: str
    invoice_number: str


@dataclass(frozen=True)
class NumberFormat:
    """Number format for one numbering scheme."""

    prefix: str = "PVC-"
    min_width: int = 3

    @cached_property
    def _lead_pattern(self) -> re.Pattern[str]:
        return re.compile(rf"{re.escape(self.prefix)}([0-9]+)")

    def format_lead_number(self, value: int) -> str:
        if value < 1:
            raise ValueError(f"Lead sequence value must be positive, got {value}")
        return f"{self.prefix}{value:0{self.min_width}d}"

    def parse_lead_suffix(self, lead_number: str | None) -> int | None:
        """Return the numeric suffix of a lead number, or None if malformed."""
        if not lead_number:
            return None
        match = self._lead_pattern.fullmatch(lead_number)
        if match is None:
            return None
        return int(match.group(1))

    def is_valid_lead_number(self, lead_number: str | None) -> bool:
        return self.parse_lead_suffix(lead_number) is not None

    def format_quote_number(self, lead_number: str, sequence: int) -> str:
        if sequence < 1:
            raise ValueError(f"Quote sequence must be positive, got {sequence}")
        return f"{lead_number}{QUOTE_MARKER}{sequence}"

    def parse_quote_sequence(self, lead_number: str, quote_number: str | None) -> int | None:
        """Return the sequence of a quote within ``lead_number``, or None.

        Quotes belonging to another lead count as non-matching, including
        leads whose number merely starts with this one (``PVC-0051-Q1``
        is not a quote of ``PVC-005``).
        """
        if not quote_number:
            return None
        quote_prefix = quote_prefix_for(lead_number)
        if not quote_number.startswith(quote_prefix):
            return None
        digits = quote_number[len(quote_prefix) :]
        if not digits.isdigit() or not digits.isascii():
            return None
        return int(digits)

    def derive_job_and_invoice_numbers(self, lead_number: str) -> JobInvoiceNumbers:
        return JobInvoiceNumbers(
            job_number=f"{lead_number}{JOB_SUFFIX}",
            invoice_number=f"{lead_number}{INVOICE_SUFFIX}",
        )


def quote_prefix_for(lead_number: str) -> str:
    """Common prefix of every quote number under ``lead_number``."""
    return f"{lead_number}{QUOTE_MARKER}"


def next_value(parsed: Iterable[int | None]) -> int:
    """Max of the parsed values plus one; malformed (None) entries are skipped."""
    return max((value for value in parsed if value is not None), default=0) + 1


number_format = NumberFormat(prefix=settings.numbering_prefix, min_width=settings.numbering_min_width)
