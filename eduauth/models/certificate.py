from enum import Enum
from datetime import date, datetime
from typing import Any, Dict, Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import ForeignKey, String, Date, DateTime, BigInteger, Integer, Boolean, JSON, Text, Index, Enum as SAEnum, func, true
from eduauth.db.base_class import Base

class ArtifactState(str, Enum):
    issued = "issued"                  # registro gravado, documento pendente
    artifact_ready = "artifact_ready"  # documento renderizado

class Certificate(Base):
    __tablename__ = "certificates"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    serial: Mapped[str] = mapped_column(String(7), unique=True, index=True)
    sequence_number: Mapped[int] = mapped_column(BigInteger, unique=True)
    certificate_type: Mapped[str] = mapped_column(String(40))
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), index=True)
    institution_id: Mapped[int] = mapped_column(ForeignKey("institutions.id"), index=True)
    roll_number: Mapped[str] = mapped_column(String(40))
    issue_date: Mapped[date] = mapped_column(Date)
    is_publicly_shareable: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())
    academic_details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)

    qr_code_data: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    authority_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    authority_title: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    artifact_state: Mapped[ArtifactState] = mapped_column(
        SAEnum(ArtifactState, name="artifact_state", native_enum=False, length=20), default=ArtifactState.issued
    )
    artifact_ref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    artifact_attempts: Mapped[int] = mapped_column(Integer, default=0)
    artifact_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    student = relationship("Student")
    institution = relationship("Institution")

    __table_args__ = (Index("ix_certificates_serial_roll", "serial", "roll_number"),)
