"""Utility functions for ledgerclass."""

from ledgerclass.utils.amount_parser import parse_amount
from ledgerclass.utils.date_parser import parse_effective_date

__all__ = ["parse_amount", "parse_effective_date"]
