# eduauth/db/init_db.py
import datetime as dt

from sqlalchemy import select
from sqlalchemy.orm import Session

from eduauth.models.enrollment import Enrollment
from eduauth.models.institution import Institution
from eduauth.models.student import Student

def init_db(db: Session) -> None:
    tenant = db.scalar(select(Institution).where(Institution.slug == "demo"))
    if not tenant:
        tenant = Institution(
            name="Demo High School",
            slug="demo",
            institution_type="SCHOOL",
            board="DHAKA",
            authority_name="Demo Principal",
            authority_title="Principal",
            can_issue_certificates=True,
        )
        db.add(tenant); db.flush()

    student = db.scalar(select(Student).where(Student.student_code == "DEMO-0001"))
    if not student:
        student = Student(
            student_code="DEMO-0001",
            first_name="Demo",
            last_name="Student",
            date_of_birth=dt.date(2006, 1, 1),
            email="student@demo.edu",
        )
        db.add(student); db.flush()

    enr = db.scalar(select(Enrollment).where(
        Enrollment.student_id == student.id, Enrollment.institution_id == tenant.id
    ))
    if not enr:
        db.add(Enrollment(student_id=student.id, institution_id=tenant.id, student_institution_id="D-001"))

    db.commit()
