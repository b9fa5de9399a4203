# eduauth/services/issuance.py
"""
Issuance workflow: enrollment + institution -> numbered certificate.

Order matters. Validation (institution, enrollment, fields) happens before the
sequence counter is touched, so a rejected request changes nothing. The
counter allocation commits on its own; the certificate insert is a second
transaction, and if it fails the allocated number is lost (reported as
StorageError). Rendering and notifications run after the certificate is
committed and can only leave the artifact pending, never undo the issuance.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eduauth.core.errors import (
    ArtifactError,
    CertificateNotFound,
    InstitutionNotFound,
    MissingRequiredField,
    NotEnrolled,
    PermissionRevoked,
    SerialOverflowError,
    StorageError,
    StudentNotFound,
)
from eduauth.core.metrics import ARTIFACT_FAILURES, CERTIFICATES_ISSUED
from eduauth.crud.enrollment import enrollment_crud
from eduauth.models.certificate import ArtifactState, Certificate
from eduauth.models.institution import Institution
from eduauth.models.student import Student
from eduauth.schemas.certificate import parse_academic_details
from eduauth.services.activity import ActivityRecorder, Notifier
from eduauth.services.artifacts import ArtifactRenderer, verify_url_for
from eduauth.services.sequence import SequenceStore
from eduauth.services.serials import encode_serial

logger = logging.getLogger(__name__)

def normalize_roll_number(roll_number: Optional[str]) -> str:
    return (roll_number or "").strip().upper()

def _today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()

def mark_artifact_ready(certificate: Certificate, artifact_ref: str) -> None:
    """Única transição do ciclo de vida: issued -> artifact_ready."""
    if certificate.artifact_state != ArtifactState.issued:
        raise ValueError(f"certificate {certificate.serial} is already {certificate.artifact_state}")
    certificate.artifact_ref = artifact_ref
    certificate.artifact_error = None
    certificate.artifact_state = ArtifactState.artifact_ready


class IssuanceCoordinator:
    def __init__(
        self,
        db: Session,
        *,
        sequences: SequenceStore,
        renderer: ArtifactRenderer,
        activity: ActivityRecorder,
        notifier: Notifier,
        today: Callable[[], dt.date] = _today,
    ):
        self.db = db
        self.sequences = sequences
        self.renderer = renderer
        self.activity = activity
        self.notifier = notifier
        self.today = today

    # ------------------------------ emissão ------------------------------

    def issue(
        self,
        institution_id: int,
        student_id: int,
        certificate_type: str,
        academic_details: Dict[str, Any] | None,
        roll_number: Optional[str],
        *,
        actor_ip: Optional[str] = None,
        defer_artifact: Optional[Callable[[int], None]] = None,
    ) -> Certificate:
        db = self.db

        # 1-3: só leitura
        institution = db.get(Institution, institution_id)
        if not institution:
            raise InstitutionNotFound()
        if not institution.can_issue_certificates:
            raise PermissionRevoked()
        if not enrollment_crud.exists(db, student_id=student_id, institution_id=institution_id):
            raise NotEnrolled(details={"student_id": student_id})

        roll = normalize_roll_number(roll_number)
        if not roll:
            raise MissingRequiredField("roll_number")
        details = dict(academic_details or {})
        if institution.board and not details.get("board"):
            details["board"] = institution.board
        parsed = parse_academic_details(certificate_type, details)

        student = db.get(Student, student_id)
        if not student:
            raise StudentNotFound()

        # 4: alocação (commit próprio)
        sequence_number = self.sequences.allocate_next()
        try:
            serial = encode_serial(sequence_number)
        except SerialOverflowError:
            logger.error("sequence %s does not fit a serial; issuance refused", sequence_number)
            raise

        # 5: persistência
        certificate = Certificate(
            serial=serial,
            sequence_number=sequence_number,
            certificate_type=parsed.certificate_type,
            student_id=student.id,
            institution_id=institution.id,
            roll_number=roll,
            issue_date=self.today(),
            is_publicly_shareable=True,
            academic_details=parsed.stored(),
            qr_code_data=verify_url_for(serial),
            authority_name=institution.authority_name,
            authority_title=institution.authority_title,
            artifact_state=ArtifactState.issued,
            artifact_ref=None,
            artifact_attempts=0,
        )
        try:
            db.add(certificate)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("certificate write failed, sequence %s (serial %s) is skipped", sequence_number, serial)
            raise StorageError(
                "Certificate could not be saved.",
                details={"sequence_number": sequence_number, "serial": serial},
            ) from exc

        CERTIFICATES_ISSUED.labels(certificate_type=certificate.certificate_type).inc()
        logger.info(
            "issued certificate %s (seq %s, %s) to student %s by institution %s",
            serial, sequence_number, certificate.certificate_type, student.id, institution.id,
        )

        # 6: artefato (best effort)
        if defer_artifact is not None:
            try:
                defer_artifact(certificate.id)
            except Exception:
                logger.exception("could not schedule artifact for %s; left pending", serial)
        else:
            self._render(certificate, student, institution)

        # 7: efeitos colaterais (fire-and-forget)
        self._side_effects(certificate, student, institution, actor_ip)
        return certificate

    # ------------------------------ artefato ------------------------------

    def generate_artifact(self, certificate_id: int, institution_id: Optional[int] = None) -> Certificate:
        """Renderiza (ou re-tenta) o documento de um certificado já emitido."""
        certificate = self.db.get(Certificate, certificate_id)
        if not certificate or (institution_id is not None and certificate.institution_id != institution_id):
            raise CertificateNotFound()
        if certificate.artifact_state == ArtifactState.artifact_ready:
            return certificate
        student = self.db.get(Student, certificate.student_id)
        institution = self.db.get(Institution, certificate.institution_id)
        return self._render(certificate, student, institution)

    def _render(self, certificate: Certificate, student: Student, institution: Institution) -> Certificate:
        certificate.artifact_attempts = (certificate.artifact_attempts or 0) + 1
        try:
            ref = self.renderer.render(certificate, student, institution)
        except Exception as exc:
            err = exc if isinstance(exc, ArtifactError) else ArtifactError(str(exc) or None)
            certificate.artifact_error = err.message
            ARTIFACT_FAILURES.inc()
            logger.warning("artifact for %s failed (attempt %s): %s",
                           certificate.serial, certificate.artifact_attempts, err.message)
        else:
            mark_artifact_ready(certificate, ref)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("could not save artifact state for %s; left pending", certificate.serial)
        return certificate

    # ------------------------------ privacidade ------------------------------

    def set_shareable(self, certificate_id: int, institution_id: int, shareable: bool) -> Certificate:
        certificate = self.db.get(Certificate, certificate_id)
        if not certificate or certificate.institution_id != institution_id:
            raise CertificateNotFound()
        certificate.is_publicly_shareable = bool(shareable)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError("Sharing preference could not be saved.") from exc
        logger.info("certificate %s shareable=%s", certificate.serial, certificate.is_publicly_shareable)
        return certificate

    # ------------------------------ efeitos ------------------------------

    def _side_effects(self, certificate: Certificate, student: Student, institution: Institution,
                      actor_ip: Optional[str]) -> None:
        try:
            self.activity.record(
                action="CERTIFICATE_ISSUED",
                actor_type="INSTITUTION",
                actor_name=institution.name,
                target_type="CERTIFICATE",
                target_id=certificate.id,
                institution_id=institution.id,
                ip_address=actor_ip,
                details={"serial": certificate.serial},
            )
        except Exception:
            logger.exception("activity log failed for %s", certificate.serial)
        try:
            self.notifier.certificate_issued(certificate, student, institution)
        except Exception:
            logger.exception("notification failed for %s", certificate.serial)
