from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from eduauth.models.certificate import Certificate

def get_by_serial_and_roll(db: Session, *, serial: str, roll_number: str) -> Certificate | None:
    stmt = select(Certificate).where(Certificate.serial == serial, Certificate.roll_number == roll_number)
    return db.execute(stmt).scalar_one_or_none()

def get_for_institution(db: Session, *, certificate_id: int, institution_id: int) -> Certificate | None:
    c = db.get(Certificate, certificate_id)
    if not c or c.institution_id != institution_id:
        return None
    return c

def list_for_institution(db: Session, institution_id: int, *, skip: int = 0, limit: int = 100) -> List[Certificate]:
    stmt = (
        select(Certificate)
        .where(Certificate.institution_id == institution_id)
        .order_by(Certificate.issue_date.desc(), Certificate.id.desc())
        .offset(skip).limit(limit)
    )
    return list(db.scalars(stmt).all())

def count(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Certificate)) or 0
