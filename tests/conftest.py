"""
Fixtures compartilhadas: banco SQLite isolado por teste, dados mínimos
(instituição, aluno, matrícula) e colaboradores falsos para artefato/e-mail.
"""
import os
import tempfile

# settings são lidas no import; apontar para um diretório descartável antes
_DATA_DIR = tempfile.mkdtemp(prefix="eduauth-tests-")
os.environ.setdefault("DATA_DIR", _DATA_DIR)
os.environ.setdefault("SMTP_HOST", "")

import datetime as dt  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from eduauth.core.ratelimit import limiter  # noqa: E402
from eduauth.core.tokens import create_access_token  # noqa: E402
from eduauth.db.base import Base  # noqa: E402
from eduauth.db.session import make_engine  # noqa: E402
from eduauth.main import create_app  # noqa: E402
from eduauth.models.enrollment import Enrollment  # noqa: E402
from eduauth.models.institution import Institution  # noqa: E402
from eduauth.models.student import Student  # noqa: E402
from eduauth.services.activity import DbActivityRecorder  # noqa: E402
from eduauth.services.issuance import IssuanceCoordinator  # noqa: E402
from eduauth.services.sequence import SqlSequenceStore  # noqa: E402

ISSUE_DATE = dt.date(2025, 1, 15)


class FakeRenderer:
    """Renderer em memória; ``fail=True`` simula falha de geração."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def render(self, certificate, student, institution):
        self.calls.append(certificate.serial)
        if self.fail:
            raise RuntimeError("renderer offline")
        return f"/static/certificates/{institution.slug}/{certificate.serial}.pdf"


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def certificate_issued(self, certificate, student, institution):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((certificate.serial, student.email))


@pytest.fixture
def engine(tmp_path):
    """Banco em arquivo: as threads do TestClient e dos testes de concorrência o compartilham."""
    eng = make_engine(f"sqlite:///{tmp_path / 'eduauth-test.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def institution(db):
    inst = Institution(
        name="Dhaka Residential Model College",
        slug="drmc",
        institution_type="COLLEGE",
        board="DHAKA",
        authority_name="A. Rahman",
        authority_title="Principal",
        can_issue_certificates=True,
    )
    db.add(inst)
    db.commit()
    return inst


@pytest.fixture
def student(db):
    st = Student(
        student_code="STU-0001",
        first_name="Nusrat",
        middle_name=None,
        last_name="Jahan",
        date_of_birth=dt.date(2007, 3, 9),
        email="nusrat@example.com",
    )
    db.add(st)
    db.commit()
    return st


@pytest.fixture
def enrollment(db, institution, student):
    enr = Enrollment(student_id=student.id, institution_id=institution.id, student_institution_id="DRMC-17")
    db.add(enr)
    db.commit()
    return enr


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def sequences(session_factory):
    return SqlSequenceStore(session_factory)


@pytest.fixture
def coordinator(db, session_factory, sequences, renderer, notifier):
    return IssuanceCoordinator(
        db,
        sequences=sequences,
        renderer=renderer,
        activity=DbActivityRecorder(session_factory),
        notifier=notifier,
        today=lambda: ISSUE_DATE,
    )


@pytest.fixture
def ssc_fields():
    """Campos acadêmicos válidos para um SSC."""
    return {"examination_year": 2024, "gpa": 4.75, "group": "Science", "registration_number": "R-991"}


@pytest.fixture
def app(session_factory, sequences, renderer, notifier):
    return create_app(
        session_factory=session_factory,
        sequence_store=sequences,
        renderer=renderer,
        notifier=notifier,
        metrics=False,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(institution):
    token = create_access_token(institution_slug=institution.slug)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Contadores do limiter são globais ao processo; cada teste começa zerado."""
    limiter.reset()
    yield
    limiter.reset()
