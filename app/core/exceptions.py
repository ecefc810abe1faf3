"""
Fee domain errors.

Services raise these; the HTTP layer maps each kind to a status code.
Nothing here is retried or rolled back.
"""


class FeeError(Exception):
    """Base class for fee and payment errors."""
    pass


class FeeValidationError(FeeError):
    """Bad input rejected before any write (e.g. non-positive payment)."""
    pass


class NotFoundError(FeeError):
    """Referenced student, course or ledger entry does not exist."""
    pass


class NoBillableCoursesError(FeeError):
    """Payment requested for a student with no open fees and no courses."""

    def __init__(
        self,
        student_id: str,
        message: str = "No outstanding fees or enrolled courses to pay for this student",
    ):
        self.student_id = student_id
        super().__init__(message)


class PersistenceError(FeeError):
    """Record store read or write failed."""
    pass
