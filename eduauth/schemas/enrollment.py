from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

class Enrollment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    institution_id: int
    student_institution_id: Optional[str] = None
    created_at: Optional[datetime] = None

class EnrollmentCreate(BaseModel):
    student_id: int
    student_institution_id: Optional[str] = None
