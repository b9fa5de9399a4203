from eduauth.crud.base import CRUDBase
from eduauth.models.student import Student
from eduauth.schemas.student import StudentCreate

student_crud = CRUDBase[Student, StudentCreate](Student)
