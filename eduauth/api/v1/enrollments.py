# eduauth/api/v1/enrollments.py
from __future__ import annotations

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eduauth.api.deps import get_db, get_current_institution
from eduauth.crud.enrollment import enrollment_crud
from eduauth.crud.student import student_crud
from eduauth.models.institution import Institution
from eduauth.schemas.enrollment import Enrollment as EnrollmentOut, EnrollmentCreate

router = APIRouter()

@router.get("", response_model=List[EnrollmentOut])
@router.get("/", response_model=List[EnrollmentOut], include_in_schema=False)
def list_enrollments(
    db: Session = Depends(get_db),
    institution: Institution = Depends(get_current_institution),
):
    return enrollment_crud.list_for_institution(db, institution.id)

@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_enrollment(
    body: EnrollmentCreate,
    db: Session = Depends(get_db),
    institution: Institution = Depends(get_current_institution),
):
    if not student_crud.get(db, body.student_id):
        raise HTTPException(status_code=404, detail="Student não encontrado")
    if enrollment_crud.exists(db, student_id=body.student_id, institution_id=institution.id):
        raise HTTPException(status_code=409, detail="Student já matriculado nesta instituição")
    return enrollment_crud.enroll(db, institution_id=institution.id, obj_in=body)
