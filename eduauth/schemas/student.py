from datetime import date
from typing import Optional
from pydantic import BaseModel, EmailStr, field_validator

class StudentBase(BaseModel):
    student_code: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    date_of_birth: Optional[date] = None
    email: EmailStr

    @field_validator("student_code", mode="before")
    @classmethod
    def _normaliza_codigo(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("student_code obrigatório.")
        return str(v).strip().upper()

class StudentCreate(StudentBase):
    pass
