import pytest

from telemed.models.enums import MedicalSpecialization, UserRole
from telemed.services.page_service import build_auth_form

DOCTOR_ONLY = {"license_number", "specialization", "years_of_experience", "consultation_fee", "education"}
PATIENT_ONLY = {"date_of_birth", "phone"}


def field_names(view_json):
    return [field["name"] for field in view_json["fields"]]


class TestLanding:

    def test_landing_for_visitor(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["user"] is None
        assert [link["label"] for link in data["nav"]] == ["Sign In", "Get Started"]
        assert all(link["href"].startswith("/auth") for link in data["nav"])
        assert len(data["hero_actions"]) == 2
        assert len(data["features"]) == 6
        assert data["cta_action"]["href"].startswith("/auth")
        assert data["footer"].startswith("Your trusted partner")

    def test_landing_for_signed_in_user(self, client, backend, patient):
        response = client.get("/", headers=backend.auth_headers(patient))
        assert response.status_code == 200

        data = response.json()
        assert data["user"]["id"] == patient["id"]
        assert data["nav"] == [{"label": "Go to Dashboard", "href": "/dashboard", "variant": "default"}]
        assert data["hero_actions"] == []
        assert data["cta_action"] is None


class TestAuthPage:

    def test_sign_in_form(self, client):
        response = client.get("/auth")
        assert response.status_code == 200

        data = response.json()
        assert data["mode"] == "sign-in"
        assert data["title"] == "Welcome Back"
        assert field_names(data) == ["email", "password"]
        assert data["role_tabs"] == []
        assert data["submit_url"] == "/api/v1/auth/sign-in"

    def test_sign_up_form_patient(self, client):
        response = client.get("/auth", params={"mode": "sign-up", "role": "patient"})
        assert response.status_code == 200

        names = set(field_names(response.json()))
        assert PATIENT_ONLY <= names
        assert not DOCTOR_ONLY & names
        assert {"first_name", "last_name", "email", "password", "confirm_password"} <= names

    def test_sign_up_form_doctor(self, client):
        response = client.get("/auth", params={"mode": "sign-up", "role": "doctor"})
        assert response.status_code == 200

        data = response.json()
        names = set(field_names(data))
        assert DOCTOR_ONLY <= names
        assert not PATIENT_ONLY & names
        assert data["selected_role"] == "doctor"
        assert [tab["value"] for tab in data["role_tabs"]] == ["patient", "doctor"]

    def test_specialization_options_cover_enum(self):
        form = build_auth_form("sign-up", UserRole.DOCTOR)
        specialization = next(f for f in form.fields if f.name == "specialization")
        assert [o.value for o in specialization.options] == [s.value for s in MedicalSpecialization]
        assert specialization.options[0].label == "General Practice"

    def test_sign_up_defaults_to_patient(self):
        form = build_auth_form("sign-up")
        assert form.selected_role == "patient"
        assert "phone" in form.field_names

    @pytest.mark.parametrize("params", [{"mode": "reset"}, {"mode": "sign-up", "role": "admin"}])
    def test_invalid_form_request(self, client, params):
        response = client.get("/auth", params=params)
        assert response.status_code == 400

    def test_signed_in_user_is_sent_home(self, client, backend, patient):
        response = client.get("/auth", headers=backend.auth_headers(patient), follow_redirects=False)
        assert response.status_code == 307
        assert response.headers["location"] == "/"


class TestServiceEndpoints:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_info(self, client):
        data = client.get("/api/v1/info").json()
        assert data["pages"] == {"landing": "/", "auth": "/auth", "dashboard": "/dashboard"}

    def test_unknown_route(self, client):
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"
