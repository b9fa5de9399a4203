"""
Testes da API HTTP
"""
import pytest

from eduauth.core.tokens import create_access_token, decode_access
from eduauth.models.institution import Institution
from eduauth.models.student import Student
from eduauth.services.serials import encode_serial

ISSUE_URL = "/api/v1/institution/certificates/issue"
VERIFY_URL = "/api/v1/verify/certificate"


@pytest.fixture
def issue_body(student, ssc_fields):
    return {"student_id": student.id, "certificate_type": "SSC", "roll_number": "r-1024", **ssc_fields}


class TestHealth:
    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_v1_health(self, client):
        assert client.get("/api/v1/health").status_code == 200


class TestIssueEndpoint:
    def test_issue_success(self, client, auth_headers, enrollment, issue_body):
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["serial"] == "0000011"
        assert data["roll_number"] == "R-1024"
        assert data["academic_details"]["board"] == "DHAKA"
        assert data["is_publicly_shareable"] is True

    def test_artifact_rendered_after_response(self, client, auth_headers, enrollment, issue_body, renderer):
        cid = client.post(ISSUE_URL, json=issue_body, headers=auth_headers).json()["id"]

        assert renderer.calls == ["0000011"]
        data = client.get(f"/api/v1/institution/certificates/{cid}", headers=auth_headers).json()
        assert data["artifact_state"] == "artifact_ready"
        assert data["artifact_ref"] == "/static/certificates/drmc/0000011.pdf"

    def test_requires_token(self, client, enrollment, issue_body):
        assert client.post(ISSUE_URL, json=issue_body).status_code == 401

    def test_rejects_bad_token(self, client, enrollment, issue_body):
        response = client.post(ISSUE_URL, json=issue_body, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_unknown_institution_token(self, client, enrollment, issue_body):
        token = create_access_token(institution_slug="ghost")
        response = client.post(ISSUE_URL, json=issue_body, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_not_enrolled(self, client, auth_headers, institution, issue_body):
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "NOT_ENROLLED"

    def test_missing_roll_number(self, client, auth_headers, enrollment, issue_body):
        issue_body.pop("roll_number")
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {
            "code": "MISSING_REQUIRED_FIELD",
            "message": "Field 'roll_number' is required.",
            "details": {"field": "roll_number"},
        }

    def test_invalid_type(self, client, auth_headers, enrollment, issue_body):
        issue_body["certificate_type"] = "PHD"
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_CERTIFICATE_TYPE"

    def test_permission_revoked(self, client, db, auth_headers, institution, enrollment, issue_body):
        institution.can_issue_certificates = False
        db.commit()
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_REVOKED"

    def test_idempotent_replay(self, client, auth_headers, enrollment, issue_body, sequences):
        headers = {**auth_headers, "Idempotency-Key": "issue-abc-1"}
        first = client.post(ISSUE_URL, json=issue_body, headers=headers)
        second = client.post(ISSUE_URL, json=issue_body, headers=headers)

        assert first.status_code == second.status_code == 201
        assert second.headers.get("Idempotent-Replay") == "true"
        assert second.json()["serial"] == first.json()["serial"]
        assert sequences.current() == 1

    def test_failed_request_is_not_replayed(self, client, auth_headers, institution, student, issue_body, db):
        headers = {**auth_headers, "Idempotency-Key": "issue-abc-2"}
        assert client.post(ISSUE_URL, json=issue_body, headers=headers).status_code == 400

        client.post("/api/v1/institution/enrollments", json={"student_id": student.id}, headers=auth_headers)
        retry = client.post(ISSUE_URL, json=issue_body, headers=headers)
        assert retry.status_code == 201
        assert "Idempotent-Replay" not in retry.headers


class TestCertificateEndpoints:
    @pytest.fixture
    def issued(self, client, auth_headers, enrollment, issue_body):
        return client.post(ISSUE_URL, json=issue_body, headers=auth_headers).json()

    def test_list(self, client, auth_headers, issued):
        rows = client.get("/api/v1/institution/certificates", headers=auth_headers).json()
        assert [r["serial"] for r in rows] == [issued["serial"]]

    def test_other_institution_sees_nothing(self, client, db, issued):
        db.add(Institution(name="Other School", slug="other", institution_type="SCHOOL"))
        db.commit()
        headers = {"Authorization": f"Bearer {create_access_token(institution_slug='other')}"}

        assert client.get("/api/v1/institution/certificates", headers=headers).json() == []
        response = client.get(f"/api/v1/institution/certificates/{issued['id']}", headers=headers)
        assert response.status_code == 404
        assert response.json()["code"] == "CERTIFICATE_NOT_FOUND"

    def test_retry_artifact(self, client, auth_headers, enrollment, issue_body, renderer):
        renderer.fail = True
        cid = client.post(ISSUE_URL, json=issue_body, headers=auth_headers).json()["id"]

        renderer.fail = False
        response = client.post(f"/api/v1/institution/certificates/{cid}/artifact", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["artifact_state"] == "artifact_ready"
        assert response.json()["artifact_attempts"] == 2

    def test_sharing_toggle(self, client, auth_headers, issued):
        url = f"/api/v1/institution/certificates/{issued['id']}/sharing"
        response = client.patch(url, json={"is_publicly_shareable": False}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["is_publicly_shareable"] is False


class TestVerifyEndpoint:
    @pytest.fixture
    def issued(self, client, auth_headers, enrollment, issue_body):
        return client.post(ISSUE_URL, json=issue_body, headers=auth_headers).json()

    def test_verified(self, client, issued):
        response = client.post(VERIFY_URL, json={"serial": issued["serial"].lower(), "roll_number": "R-1024"})
        assert response.status_code == 200
        data = response.json()
        assert data["serial"] == issued["serial"]
        assert data["student_name"] == "Nusrat Jahan"
        assert "student_id" not in data

    def test_invalid_format(self, client, issued):
        response = client.post(VERIFY_URL, json={"serial": "0000012", "roll_number": "R-1024"})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FORMAT"

    def test_missing_fields(self, client):
        assert client.post(VERIFY_URL, json={}).status_code == 400

    def test_not_found(self, client, issued):
        response = client.post(VERIFY_URL, json={"serial": encode_serial(77), "roll_number": "R-1024"})
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_not_shareable(self, client, auth_headers, issued):
        client.patch(f"/api/v1/institution/certificates/{issued['id']}/sharing",
                     json={"is_publicly_shareable": False}, headers=auth_headers)
        response = client.post(VERIFY_URL, json={"serial": issued["serial"], "roll_number": "R-1024"})
        assert response.status_code == 403
        assert response.json()["code"] == "NOT_SHAREABLE"

    def test_stats(self, client, issued):
        assert client.get("/api/v1/verify/stats").json() == {"students": 1, "institutions": 1, "certificates": 1}


class TestEnrollmentEndpoints:
    def test_enroll_and_list(self, client, db, auth_headers, institution):
        st = Student(student_code="STU-0002", first_name="Rafi", last_name="Khan", email="rafi@example.com")
        db.add(st)
        db.commit()

        response = client.post("/api/v1/institution/enrollments",
                               json={"student_id": st.id, "student_institution_id": "DRMC-18"}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["institution_id"] == institution.id

        rows = client.get("/api/v1/institution/enrollments", headers=auth_headers).json()
        assert [r["student_id"] for r in rows] == [st.id]

    def test_duplicate(self, client, auth_headers, student, enrollment):
        response = client.post("/api/v1/institution/enrollments", json={"student_id": student.id}, headers=auth_headers)
        assert response.status_code == 409

    def test_unknown_student(self, client, auth_headers):
        response = client.post("/api/v1/institution/enrollments", json={"student_id": 999}, headers=auth_headers)
        assert response.status_code == 404


class TestTokens:
    def test_round_trip(self):
        payload = decode_access(create_access_token(institution_slug="drmc"))
        assert payload["sub"] == "drmc"
        assert payload["role"] == "institution"

    def test_expired(self):
        assert decode_access(create_access_token(institution_slug="drmc", expires_minutes=-1)) is None

    def test_garbage(self):
        assert decode_access("a.b.c") is None


class TestRequestValidation:
    """Corpo malformado responde 400 no formato {"code","message","details"}."""

    def test_verify_with_wrong_types(self, client):
        response = client.post(VERIFY_URL, json={"serial": None, "roll_number": 12})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FORMAT"
        assert set(response.json()) == {"code", "message", "details"}

    def test_verify_with_non_object_body(self, client):
        response = client.post(VERIFY_URL, json=["0000011"])
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FORMAT"

    def test_issue_without_student_id(self, client, auth_headers, enrollment, issue_body):
        issue_body.pop("student_id")
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {
            "code": "MISSING_REQUIRED_FIELD",
            "message": "Field 'student_id' is required.",
            "details": {"field": "student_id"},
        }

    def test_issue_with_wrong_type(self, client, auth_headers, enrollment, issue_body):
        issue_body["student_id"] = "not-a-number"
        response = client.post(ISSUE_URL, json=issue_body, headers=auth_headers)
        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "VALIDATION_ERROR"
        assert data["details"]["errors"][0]["field"] == "body.student_id"


class TestVerifyRateLimit:
    def test_limit_per_client(self, client):
        body = {"serial": encode_serial(5), "roll_number": "R-1"}
        for _ in range(20):
            assert client.post(VERIFY_URL, json=body).status_code == 404

        response = client.post(VERIFY_URL, json=body)
        assert response.status_code == 429
        data = response.json()
        assert data["code"] == "RATE_LIMITED"
        assert "20 per 1 minute" in data["details"]["limit"]

    def test_stats_is_not_limited(self, client):
        for _ in range(25):
            assert client.get("/api/v1/verify/stats").status_code == 200
