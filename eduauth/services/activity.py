# eduauth/services/activity.py
"""Side effects of an issuance: activity log row and e-mail. Never raise."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Any, Callable, Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eduauth.core.config import settings
from eduauth.models.activity import ActivityLog
from eduauth.models.certificate import Certificate
from eduauth.models.institution import Institution
from eduauth.models.student import Student

logger = logging.getLogger(__name__)


class ActivityRecorder(Protocol):
    def record(self, *, action: str, actor_type: str, target_type: str, **fields: Any) -> None: ...


class Notifier(Protocol):
    def certificate_issued(self, certificate: Certificate, student: Student, institution: Institution) -> None: ...


class DbActivityRecorder:
    """Grava em ``activity_logs`` numa sessão própria, fora da transação da emissão."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def record(
        self,
        *,
        action: str,
        actor_type: str,
        target_type: str,
        actor_name: Optional[str] = None,
        target_id: Optional[int] = None,
        institution_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            with self._session_factory() as db:
                db.add(ActivityLog(
                    action=action,
                    actor_type=actor_type,
                    actor_name=actor_name,
                    target_type=target_type,
                    target_id=target_id,
                    institution_id=institution_id,
                    ip_address=ip_address,
                    details=details,
                ))
                db.commit()
        except SQLAlchemyError:
            logger.exception("could not record activity %s for %s %s", action, target_type, target_id)


class EmailNotifier:
    """Aviso de emissão por SMTP; desligado quando ``SMTP_HOST`` está vazio."""

    def __init__(self, host: str | None = None, port: int | None = None, sender: str | None = None):
        self.host = settings.SMTP_HOST if host is None else host
        self.port = port or settings.SMTP_PORT
        self.sender = sender or settings.SMTP_SENDER

    def build_message(self, certificate: Certificate, student: Student, institution: Institution) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = student.email
        msg["Subject"] = f"New Certificate Issued - {certificate.certificate_type}"
        msg.set_content(
            f"Dear {student.first_name},\n\n"
            f"{institution.name} issued your {certificate.certificate_type} certificate.\n"
            f"Serial number: {certificate.serial}\n"
        )
        return msg

    def certificate_issued(self, certificate: Certificate, student: Student, institution: Institution) -> None:
        if not self.host:
            logger.debug("SMTP disabled, skipping notification for %s", certificate.serial)
            return
        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
                smtp.send_message(self.build_message(certificate, student, institution))
        except (smtplib.SMTPException, OSError):
            logger.warning("could not e-mail certificate %s to student %s", certificate.serial, student.id, exc_info=True)
