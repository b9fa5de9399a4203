from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Boolean, DateTime, func, true
from eduauth.db.base_class import Base

class Institution(Base):
    __tablename__ = "institutions"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    institution_type: Mapped[str] = mapped_column(String(40))  # SCHOOL, COLLEGE, UNIVERSITY, ...
    board: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    # assinatura impressa no documento
    authority_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    authority_title: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)

    can_issue_certificates: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    enrollments = relationship("Enrollment", back_populates="institution")
