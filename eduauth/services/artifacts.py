# eduauth/services/artifacts.py
from __future__ import annotations

import os, io, base64, logging
from typing import Any, Dict, Protocol, Tuple

from jinja2 import Environment, BaseLoader, select_autoescape
from xhtml2pdf import pisa  # type: ignore
import qrcode  # type: ignore

from eduauth.core.config import settings
from eduauth.core.errors import ArtifactError
from eduauth.models.certificate import Certificate
from eduauth.models.institution import Institution
from eduauth.models.student import Student

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """
<!doctype html>
<html>
  <body style="font-family: Helvetica, Arial, sans-serif; padding: 36px;">
    <div style="text-align:right; font-size: 10px;">Serial No: <b>{{ serial }}</b></div>
    <div style="text-align:center;">
      <h1>{{ institution.name }}</h1>
      <h2>{{ certificate_type }} Certificate</h2>
      <p>This is to certify that</p>
      <h2>{{ student.name }}</h2>
      {% if student.date_of_birth %}<p>Date of Birth: {{ student.date_of_birth }}</p>{% endif %}
      <p>{{ summary }}</p>
    </div>
    <table style="margin: 24px auto; font-size: 11px;">
      {% for label, value in rows %}
      <tr><td style="padding-right: 24px;">{{ label }}:</td><td>{{ value }}</td></tr>
      {% endfor %}
    </table>
    <div style="text-align:center;">
      <p>Date of Issue: {{ issue_date }}</p>
      {% if authority.name %}<p><b>{{ authority.name }}</b><br>{{ authority.title or "" }}</p>{% endif %}
      <img src="{{ qr_data_uri }}" style="height:110px">
      <div style="font-size: 9px; margin-top:8px">Verify at: {{ verify_url }}</div>
    </div>
  </body>
</html>
""".strip()

# ordem das linhas no documento
_ROW_LABELS = (
    ("registration_number", "Registration Number"),
    ("examination_year", "Examination Year"),
    ("board", "Board"),
    ("group", "Group"),
    ("gpa", "GPA"),
    ("passing_year", "Passing Year"),
    ("diploma_subject", "Diploma Subject"),
    ("duration", "Duration"),
    ("session", "Session"),
    ("program", "Program"),
    ("department", "Department"),
    ("major", "Major"),
    ("cgpa", "CGPA"),
    ("degree_class", "Degree Class"),
    ("convocation_date", "Convocation"),
    ("completion_date", "Completion Date"),
    ("skill_name", "Skill Name"),
)


class ArtifactRenderer(Protocol):
    def render(self, certificate: Certificate, student: Student, institution: Institution) -> str: ...


# -------------------------- Utils --------------------------

def _qr_data_uri(text: str) -> str:
    img = qrcode.make(text)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    b64 = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{b64}"

def _render_html(template: str, ctx: Dict[str, Any]) -> str:
    env = Environment(
        loader=BaseLoader(),
        autoescape=select_autoescape(["html", "xml"], default_for_string=True),
        enable_async=False,
    )
    return env.from_string(template).render(**ctx)

def _html_to_pdf_bytes(html: str) -> bytes:
    out = io.BytesIO()
    status = pisa.CreatePDF(io.StringIO(html), dest=out)
    if status.err:
        raise ArtifactError(details={"pisa_errors": int(status.err)})
    return out.getvalue()

def _format_type(certificate_type: str) -> str:
    return (certificate_type or "").replace("_", " ")

def _summary(certificate: Certificate) -> str:
    details = certificate.academic_details or {}
    if details.get("program"):
        text = f"has successfully completed {details['program']}"
        if details.get("major"):
            text += f" in {details['major']}"
        if details.get("department"):
            text += f" from the Department of {details['department']}"
    else:
        text = f"has successfully completed the requirements for {_format_type(certificate.certificate_type)}"
    if details.get("gpa") is not None:
        text += f" with GPA {details['gpa']}"
    if details.get("cgpa") is not None:
        text += f" with CGPA {details['cgpa']}"
    return text

def _student_institution_id(student: Student, institution: Institution) -> str:
    # matrícula do aluno na instituição emissora; sem ela, o código global
    for enrollment in student.enrollments or ():
        if enrollment.institution_id == institution.id and enrollment.student_institution_id:
            return enrollment.student_institution_id
    return student.student_code

def verify_url_for(serial: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/verify?serial={serial}"


class PdfArtifactRenderer:
    """HTML (Jinja2) -> PDF (xhtml2pdf), publicado em /static/certificates/<slug>/<serial>.pdf."""

    def __init__(self, output_dir: str | None = None, template: str | None = None):
        self.output_dir = output_dir or settings.ARTIFACT_DIR
        self.template = template or DEFAULT_TEMPLATE

    def build_html(self, certificate: Certificate, student: Student, institution: Institution) -> str:
        details = certificate.academic_details or {}
        rows = [("Student ID", _student_institution_id(student, institution)), ("Roll Number", certificate.roll_number)]
        rows += [(label, details[key]) for key, label in _ROW_LABELS if details.get(key) not in (None, "")]
        verify_url = certificate.qr_code_data or verify_url_for(certificate.serial)
        ctx = dict(
            serial=certificate.serial,
            certificate_type=_format_type(certificate.certificate_type),
            institution=dict(name=institution.name),
            student=dict(
                name=student.full_name,
                date_of_birth=student.date_of_birth.strftime("%d/%m/%Y") if student.date_of_birth else "",
            ),
            summary=_summary(certificate),
            rows=rows,
            issue_date=certificate.issue_date.strftime("%d/%m/%Y"),
            authority=dict(name=certificate.authority_name, title=certificate.authority_title),
            qr_data_uri=_qr_data_uri(verify_url),
            verify_url=verify_url,
        )
        return _render_html(self.template, ctx)

    def _save_pdf(self, institution_slug: str, serial: str, pdf_bytes: bytes) -> Tuple[str, str]:
        # path físico + URL pública (via StaticFiles /static)
        directory = os.path.join(self.output_dir, "certificates", institution_slug)
        os.makedirs(directory, exist_ok=True)
        filename = f"{serial}.pdf"
        path = os.path.join(directory, filename)
        with open(path, "wb") as f:
            f.write(pdf_bytes)
        return path, f"/static/certificates/{institution_slug}/{filename}"

    def render(self, certificate: Certificate, student: Student, institution: Institution) -> str:
        try:
            html = self.build_html(certificate, student, institution)
            pdf_bytes = _html_to_pdf_bytes(html)
            _, url = self._save_pdf(institution.slug, certificate.serial, pdf_bytes)
        except ArtifactError:
            raise
        except Exception as exc:
            raise ArtifactError(str(exc) or None, details={"serial": certificate.serial}) from exc
        logger.info("rendered certificate %s -> %s", certificate.serial, url)
        return url
