from sqlalchemy import select
from sqlalchemy.orm import Session
from eduauth.crud.base import CRUDBase
from eduauth.models.institution import Institution
from eduauth.schemas.institution import InstitutionCreate

class CRUDInstitution(CRUDBase[Institution, InstitutionCreate]):
    def get_by_slug(self, db: Session, slug: str) -> Institution | None:
        return db.execute(select(Institution).where(Institution.slug == slug)).scalar_one_or_none()

institution_crud = CRUDInstitution(Institution)
