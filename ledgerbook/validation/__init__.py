"""Validation package: entry checks and the storage load boundary."""

from ledgerbook.validation.parser import LoadResult, RecordParser, coerce_number
from ledgerbook.validation.validator import EntryValidator

__all__ = ["EntryValidator", "LoadResult", "RecordParser", "coerce_number"]
