# eduauth/schemas/certificate.py
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, ClassVar, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from eduauth.core.errors import InvalidCertificateType, MissingRequiredField, ValidationError
from eduauth.models.certificate import ArtifactState

SECONDARY_TYPES = (
    "JSC", "SSC", "VOCATIONAL_SSC", "HSC", "VOCATIONAL_HSC",
    "BM", "JDC", "DAKHIL", "ALIM", "VOCATIONAL_MADRASAH",
)
DIPLOMA_TYPES = ("DIPLOMA",)
DEGREE_TYPES = ("BSC", "MSC", "BA", "MA", "BBA", "MBA", "LLB", "LLM", "MBBS", "BDS")
TRAINING_TYPES = ("TRAINING_COMPLETION", "SKILL_CERTIFICATE")
CERTIFICATE_TYPES = SECONDARY_TYPES + DIPLOMA_TYPES + DEGREE_TYPES + TRAINING_TYPES

# ------------------------ detalhes acadêmicos (por tipo) ------------------------

class _DetailsBase(BaseModel):
    # o formulário manda todas as chaves; as de outros tipos são ignoradas
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    score_fields: ClassVar[Tuple[str, ...]] = ()

    def stored(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, exclude={"certificate_type"})

    def scores(self) -> Dict[str, Any]:
        data = self.stored()
        return {k: data[k] for k in self.score_fields if k in data}


class SecondaryDetails(_DetailsBase):
    certificate_type: Literal[SECONDARY_TYPES]  # type: ignore[valid-type]
    board: str
    examination_year: int = Field(ge=1950, le=2100)
    gpa: float = Field(ge=0, le=5)
    registration_number: Optional[str] = None
    group: Optional[str] = None
    passing_year: Optional[int] = Field(default=None, ge=1950, le=2100)

    score_fields: ClassVar[Tuple[str, ...]] = ("board", "group", "examination_year", "gpa")


class DiplomaDetails(_DetailsBase):
    certificate_type: Literal[DIPLOMA_TYPES]  # type: ignore[valid-type]
    diploma_subject: str
    board: Optional[str] = None
    duration: Optional[str] = None
    session: Optional[str] = None
    cgpa: Optional[float] = Field(default=None, ge=0, le=4)
    passing_year: Optional[int] = Field(default=None, ge=1950, le=2100)

    score_fields: ClassVar[Tuple[str, ...]] = ("diploma_subject", "board", "cgpa", "passing_year")


class DegreeDetails(_DetailsBase):
    certificate_type: Literal[DEGREE_TYPES]  # type: ignore[valid-type]
    program: str
    department: Optional[str] = None
    major: Optional[str] = None
    session: Optional[str] = None
    cgpa: Optional[float] = Field(default=None, ge=0, le=4)
    degree_class: Optional[str] = None
    convocation_date: Optional[date] = None

    score_fields: ClassVar[Tuple[str, ...]] = ("program", "major", "cgpa", "degree_class")


class TrainingDetails(_DetailsBase):
    certificate_type: Literal[TRAINING_TYPES]  # type: ignore[valid-type]
    skill_name: str
    duration: Optional[str] = None
    completion_date: Optional[date] = None

    score_fields: ClassVar[Tuple[str, ...]] = ("skill_name", "duration", "completion_date")


AcademicDetails = Annotated[
    Union[SecondaryDetails, DiplomaDetails, DegreeDetails, TrainingDetails],
    Field(discriminator="certificate_type"),
]

_details_adapter: TypeAdapter = TypeAdapter(AcademicDetails)

def parse_academic_details(certificate_type: str, data: Dict[str, Any]) -> _DetailsBase:
    """Valida ``data`` contra a variante de ``certificate_type``."""
    ct = (certificate_type or "").strip().upper()
    if not ct:
        raise MissingRequiredField("certificate_type")
    if ct not in CERTIFICATE_TYPES:
        raise InvalidCertificateType(details={"certificate_type": certificate_type})
    # campo em branco conta como ausente
    present = {k: v for k, v in data.items() if v is not None and not (isinstance(v, str) and not v.strip())}
    try:
        return _details_adapter.validate_python({**present, "certificate_type": ct})
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        for err in errors:
            if err["type"] == "missing":
                raise MissingRequiredField(str(err["loc"][-1])) from exc
        raise ValidationError(
            "Invalid academic details.",
            details={"errors": [{"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]} for e in errors]},
        ) from exc

# --------------------------------- API ---------------------------------

class CertificateIssueIn(BaseModel):
    """Corpo do POST de emissão; os campos acadêmicos vêm soltos (extra)."""
    model_config = ConfigDict(extra="allow")

    student_id: int
    certificate_type: str
    roll_number: Optional[str] = None

    def academic_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class SharingUpdate(BaseModel):
    is_publicly_shareable: bool


class Certificate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    serial: str
    sequence_number: int
    certificate_type: str
    student_id: int
    institution_id: int
    roll_number: str
    issue_date: date
    is_publicly_shareable: bool
    academic_details: Dict[str, Any]
    qr_code_data: Optional[str] = None
    artifact_state: ArtifactState
    artifact_ref: Optional[str] = None
    artifact_attempts: int = 0
    created_at: Optional[datetime] = None


class VerifyIn(BaseModel):
    serial: str = ""
    roll_number: str = ""


class CertificatePublicView(BaseModel):
    """Projeção pública: sem ids internos."""
    model_config = ConfigDict(frozen=True)

    serial: str
    certificate_type: str
    issue_date: date
    student_name: str
    institution_name: str
    institution_type: str
    roll_number: str
    scores: Dict[str, Any] = {}


class VerificationStats(BaseModel):
    students: int
    institutions: int
    certificates: int
