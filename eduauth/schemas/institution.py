from typing import Optional
from pydantic import BaseModel

class InstitutionBase(BaseModel):
    name: str
    slug: str
    institution_type: str
    board: Optional[str] = None
    contact_email: Optional[str] = None
    authority_name: Optional[str] = None
    authority_title: Optional[str] = None

class InstitutionCreate(InstitutionBase):  # tipa o CRUDInstitution
    can_issue_certificates: bool = True
