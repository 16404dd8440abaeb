"""Lead domain exceptions."""

from fence_admin.services.exceptions import NotFoundError


class LeadNotFound(NotFoundError):
    """Lead not found (or soft-deleted)."""

    pass


class QuoteNotFound(NotFoundError):
    """Quote not found (or soft-deleted)."""

    pass
