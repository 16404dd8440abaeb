"""Numbering exceptions."""

from fence_admin.services.exceptions import ServiceError, ValidationError


class InvalidParentReference(ValidationError):
    """Parent lead number has no parsable numeric suffix."""

    def __init__(self, lead_number: str | None):
        self.lead_number = lead_number
        super().__init__(f"Invalid parent lead number: {lead_number!r}")


class DuplicateNumberCollision(ServiceError):
    """Unique number could not be allocated within the retry budget.

    Persistent collisions mean something writes numbers without going
    through the allocator or ignores the unique constraints. Not retried
    any further.
    """

    def __init__(self, family_key: str, attempts: int):
        self.family_key = family_key
        self.attempts = attempts
        super().__init__(f"Failed to allocate unique number for {family_key} after {attempts} attempts")
