# eduauth/core/errors.py
"""
Domain exceptions for issuance and verification.

Each exception carries a machine-readable ``code`` and the HTTP status the API
layer answers with; ``main.py`` turns them into ``{"code", "message", "details"}``.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class EduAuthError(Exception):
    code = "ERROR"
    status_code = 500
    message = "Unexpected error."

    def __init__(self, message: str | None = None, *, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


# ----------------------------- validação -----------------------------

class ValidationError(EduAuthError):
    code = "VALIDATION_ERROR"
    status_code = 400
    message = "Invalid input."


class MissingRequiredField(ValidationError):
    code = "MISSING_REQUIRED_FIELD"
    message = "A required field is missing."

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Field '{field}' is required.", details={"field": field})


class InvalidCertificateType(ValidationError):
    code = "INVALID_CERTIFICATE_TYPE"
    message = "Unknown certificate type."


class InvalidFormat(ValidationError):
    code = "INVALID_FORMAT"
    message = "Invalid certificate serial format."


# ------------------------------ política ------------------------------

class PolicyError(EduAuthError):
    code = "POLICY_ERROR"
    status_code = 403
    message = "Request rejected by policy."


class NotEnrolled(PolicyError):
    code = "NOT_ENROLLED"
    status_code = 400
    message = "Student is not enrolled in this institution."


class PermissionRevoked(PolicyError):
    code = "PERMISSION_REVOKED"
    message = "Institution cannot issue certificates currently."


class NotShareable(PolicyError):
    code = "NOT_SHAREABLE"
    message = (
        "This certificate is not available for public verification "
        "per the certificate holder's privacy settings."
    )


# ---------------------------- não encontrado ----------------------------

class NotFoundError(EduAuthError):
    code = "NOT_FOUND"
    status_code = 404
    message = "Resource not found."


class NotFound(NotFoundError):
    message = "Certificate not found."


class InstitutionNotFound(NotFoundError):
    code = "INSTITUTION_NOT_FOUND"
    message = "Institution profile not found."


class StudentNotFound(NotFoundError):
    code = "STUDENT_NOT_FOUND"
    message = "Student not found."


class CertificateNotFound(NotFoundError):
    code = "CERTIFICATE_NOT_FOUND"
    message = "Certificate not found."


# ------------------------------ storage ------------------------------

class StorageError(EduAuthError):
    code = "STORAGE_ERROR"
    status_code = 503
    message = "Storage failure, retry the request."


class SerialOverflowError(StorageError):
    code = "SERIAL_SPACE_EXHAUSTED"
    status_code = 507
    message = "Sequence number exceeds the 6-character serial payload."


# ------------------------------ artefato ------------------------------

class ArtifactError(EduAuthError):
    """Rendering failed; the certificate itself stays issued."""
    code = "ARTIFACT_ERROR"
    status_code = 502
    message = "Certificate document could not be rendered."


# ------------------------------ limite ------------------------------

class RateLimited(PolicyError):
    code = "RATE_LIMITED"
    status_code = 429
    message = "Too many verification attempts, please try again later."
