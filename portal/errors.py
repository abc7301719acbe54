# portal/errors.py
"""
Error taxonomy for the intake workflow.

Every error carries the HTTP status the API layer answers with:
validation errors are 400, missing references are 404 and conflicts
(duplicates, illegal or expired transitions) are 409.
"""


class PortalError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# validation
class ValidationError(PortalError):
    status_code = 400
    default_message = "Invalid request"


class InvalidFileType(ValidationError):
    default_message = "Only PDF files are allowed"


class ExtractionFailed(ValidationError):
    default_message = "Failed to parse PDF"


class PhoneNotFound(ValidationError):
    default_message = "No phone number found in the uploaded PDF."


class AgencyNotFound(ValidationError):
    default_message = "Agency not found for the provided email or name."


# not-found
class NotFoundError(PortalError):
    status_code = 404
    default_message = "Not found"


class JobNotFound(NotFoundError):
    default_message = "Job not found"


class ResumeNotFound(NotFoundError):
    default_message = "Resume not found"


# conflict
class ConflictError(PortalError):
    status_code = 409
    default_message = "Conflict"


class DuplicateSubmission(ConflictError):
    default_message = "Duplicate resume: this phone number has already been submitted for this job."


class IllegalTransition(ConflictError):
    default_message = "Illegal resume status transition"


class JobExpired(ConflictError):
    default_message = "The job deadline has passed; agencies can no longer change this resume."
