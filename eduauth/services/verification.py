# eduauth/services/verification.py
from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eduauth.core.errors import InvalidFormat, NotFound, NotShareable
from eduauth.core.metrics import VERIFICATIONS
from eduauth.crud import certificate as certificate_crud
from eduauth.models.certificate import Certificate
from eduauth.models.institution import Institution
from eduauth.models.student import Student
from eduauth.schemas.certificate import CertificatePublicView, VerificationStats, parse_academic_details
from eduauth.services.issuance import normalize_roll_number
from eduauth.services.serials import normalize_serial, validate_serial

logger = logging.getLogger(__name__)


class VerificationGate:
    """
    Public lookup by (serial, roll number).

    The serial alone is guessable (the checksum only filters typos), so the
    roll number is part of the key. "Not found" and "found but private" are
    answered differently on purpose.
    """

    def __init__(self, db: Session):
        self.db = db

    def verify(self, serial: str, roll_number: str) -> CertificatePublicView:
        # formato conferido na entrada crua; normalização só depois
        roll = normalize_roll_number(roll_number)
        if not validate_serial(serial) or not roll:
            VERIFICATIONS.labels(outcome="invalid_format").inc()
            raise InvalidFormat()
        serial = normalize_serial(serial)

        certificate = certificate_crud.get_by_serial_and_roll(self.db, serial=serial, roll_number=roll)
        if not certificate:
            VERIFICATIONS.labels(outcome="not_found").inc()
            raise NotFound()
        if not certificate.is_publicly_shareable:
            VERIFICATIONS.labels(outcome="not_shareable").inc()
            raise NotShareable()

        VERIFICATIONS.labels(outcome="verified").inc()
        logger.info("verified certificate %s", certificate.serial)
        return self._public_view(certificate)

    def _public_view(self, certificate: Certificate) -> CertificatePublicView:
        student = self.db.get(Student, certificate.student_id)
        institution = self.db.get(Institution, certificate.institution_id)
        details = parse_academic_details(certificate.certificate_type, certificate.academic_details or {})
        return CertificatePublicView(
            serial=certificate.serial,
            certificate_type=certificate.certificate_type,
            issue_date=certificate.issue_date,
            student_name=student.full_name,
            institution_name=institution.name,
            institution_type=institution.institution_type,
            roll_number=certificate.roll_number,
            scores=details.scores(),
        )

    def stats(self) -> VerificationStats:
        return VerificationStats(
            students=self.db.scalar(select(func.count()).select_from(Student)) or 0,
            institutions=self.db.scalar(
                select(func.count()).select_from(Institution).where(Institution.can_issue_certificates.is_(True))
            ) or 0,
            certificates=certificate_crud.count(self.db),
        )
