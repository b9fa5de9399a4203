from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select, exists
from eduauth.crud.base import CRUDBase
from eduauth.models.enrollment import Enrollment
from eduauth.schemas.enrollment import EnrollmentCreate

class CRUDEnrollment(CRUDBase[Enrollment, EnrollmentCreate]):
    def exists(self, db: Session, *, student_id: int, institution_id: int) -> bool:
        stmt = select(exists().where(Enrollment.student_id == student_id, Enrollment.institution_id == institution_id))
        return bool(db.scalar(stmt))

    def enroll(self, db: Session, *, institution_id: int, obj_in: EnrollmentCreate) -> Enrollment:
        return self.create(db, obj_in, extra={"institution_id": institution_id})

    def list_for_institution(self, db: Session, institution_id: int) -> List[Enrollment]:
        stmt = select(Enrollment).where(Enrollment.institution_id == institution_id).order_by(Enrollment.id)
        return list(db.scalars(stmt).all())

enrollment_crud = CRUDEnrollment(Enrollment)
