"""Job domain exceptions."""

from fence_admin.services.exceptions import ConflictError, NotFoundError


class JobNotFound(NotFoundError):
    """Job not found."""

    pass


class JobAlreadyExists(ConflictError):
    """Lead already has a job."""

    pass


class QuoteNotInLead(NotFoundError):
    """Quote does not belong to the specified lead."""

    pass
