# Carrega todos os models para registrar tabelas/relacionamentos no metadata
from eduauth.models.institution import Institution
from eduauth.models.student import Student
from eduauth.models.enrollment import Enrollment
from eduauth.models.sequence import CertificateSequence
from eduauth.models.certificate import ArtifactState, Certificate
from eduauth.models.activity import ActivityLog
from eduauth.models.idempotency import IdempotencyKey

__all__ = [
    "Institution",
    "Student",
    "Enrollment",
    "CertificateSequence",
    "ArtifactState",
    "Certificate",
    "ActivityLog",
    "IdempotencyKey",
]
