from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import ForeignKey, String, UniqueConstraint, DateTime, func
from eduauth.db.base_class import Base

class Enrollment(Base):
    __tablename__ = "enrollments"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"))
    institution_id: Mapped[int] = mapped_column(ForeignKey("institutions.id"))
    # matrícula do aluno dentro da instituição
    student_institution_id: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    student = relationship("Student", back_populates="enrollments")
    institution = relationship("Institution", back_populates="enrollments")

    __table_args__ = (UniqueConstraint("student_id", "institution_id", name="uq_enrollment_student_institution"),)
