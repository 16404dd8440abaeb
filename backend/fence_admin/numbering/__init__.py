"""Hierarchical numbering for leads, quotes, jobs and invoices."""

from fence_admin.numbering.allocator import AllocateOnConflict, SequenceAllocator
from fence_admin.numbering.exceptions import DuplicateNumberCollision, InvalidParentReference
from fence_admin.numbering.formats import JobInvoiceNumbers, NumberFormat, number_format
from fence_admin.numbering.store import NumberStore, SequenceFamily, SequenceKind, SqlNumberStore

__all__ = [
    "AllocateOnConflict",
    "DuplicateNumberCollision",
    "InvalidParentReference",
    "JobInvoiceNumbers",
    "NumberFormat",
    "NumberStore",
    "SequenceAllocator",
    "SequenceFamily",
    "SequenceKind",
    "SqlNumberStore",
    "number_format",
]
