import re
from datetime import timedelta
from pathlib import Path

from config.settings import settings
from models.employee import Employee
from routes import auth as auth_routes
from utils.security import issue_employee_token

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\x00\x01"
    b"\x00\x00\x05\x00\x01\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)


def signup(client, files=None, **overrides):
    form = dict(
        full_names="Jane Doe",
        phone_number="0712345678",
        identification_number="ID12345",
        password="Passw0rd",
        confirm_password="Passw0rd",
    )
    form.update(overrides)
    return client.post("/signup", data=form, files=files)


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def test_signup_login_scenario(client):
    response = signup(client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert re.fullmatch(r"\d{6}", body["data"]["employee_code"])
    assert body["token"]
    assert "password_hash" not in body["data"]
    assert body["data"]["profile_image"] is None

    code = body["data"]["employee_code"]
    response = client.post("/login", json={"employee_code": code, "password": "Passw0rd"})
    assert response.status_code == 200
    assert response.json()["data"]["id"] == body["data"]["id"]

    response = client.post("/login", json={"employee_code": code, "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"] == "InvalidCredentials"


def test_login_accepts_form_body(client):
    code = signup(client).json()["data"]["employee_code"]

    response = client.post("/login", data={"employee_code": code, "password": "Passw0rd"})

    assert response.status_code == 200
    assert response.json()["data"]["employee_code"] == code


def test_unknown_code_and_wrong_password_are_indistinguishable(client):
    code = signup(client).json()["data"]["employee_code"]
    unknown = "999999" if code != "999999" else "888888"

    wrong_password = client.post("/login", json={"employee_code": code, "password": "Wrong1"})
    unknown_code = client.post("/login", json={"employee_code": unknown, "password": "Passw0rd"})

    assert wrong_password.status_code == unknown_code.status_code == 401
    assert wrong_password.json() == unknown_code.json()


def test_login_rejects_malformed_input(client):
    response = client.post("/login", json={"employee_code": "123", "password": ""})

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"employee_code", "password"}


def test_login_rejects_unparseable_json(client):
    response = client.post(
        "/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_signup_reports_every_invalid_field(client):
    response = signup(
        client,
        full_names="J",
        phone_number="12345",
        identification_number="ID1",
        password="password",
        confirm_password="password",
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "ValidationError"
    fields = {error["field"] for error in body["errors"]}
    assert fields == {"full_names", "phone_number", "identification_number", "password"}


def test_signup_rejects_mismatched_confirmation(client):
    response = signup(client, confirm_password="Passw0rd!")

    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "confirm_password", "message": "Password confirmation does not match password"}
    ]


def test_signup_accepts_international_phone_format(client):
    response = signup(client, phone_number="+254112345678")

    assert response.status_code == 201
    assert response.json()["data"]["phone_number"] == "0112345678"


def test_signup_treats_international_and_local_phone_as_same_number(client):
    assert signup(client, phone_number="0712345678").status_code == 201

    response = signup(client, phone_number="+254712345678", identification_number="OTHER-ID")

    assert response.status_code == 400
    assert response.json()["field"] == "phone_number"


def test_unexpected_signup_failure_is_a_generic_server_error(client, monkeypatch):
    def broken_register(*args, **kwargs):
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(auth_routes, "register_employee", broken_register)
    before = set(Path(settings.UPLOAD_DIR).iterdir())

    response = signup(client, files={"profile_image": ("me.png", PNG_BYTES, "image/png")})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "ServerError"
    assert "secret" not in response.text
    assert set(Path(settings.UPLOAD_DIR).iterdir()) == before


def test_signup_rejects_duplicate_phone(client):
    assert signup(client).status_code == 201

    response = signup(client, identification_number="OTHER-ID")

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "DuplicateField"
    assert body["field"] == "phone_number"


def test_signup_rejects_duplicate_identification(client):
    assert signup(client).status_code == 201

    response = signup(client, phone_number="0798765432")

    assert response.status_code == 400
    assert response.json()["field"] == "identification_number"


def test_signup_stores_profile_image(client):
    response = signup(client, files={"profile_image": ("me.png", PNG_BYTES, "image/png")})

    assert response.status_code == 201
    image = response.json()["data"]["profile_image"]
    assert image.startswith("/uploads/profile-") and image.endswith(".png")
    stored = Path(settings.UPLOAD_DIR) / image[len("/uploads/"):]
    assert stored.read_bytes() == PNG_BYTES


def test_signup_rejects_non_image_upload(client, session_factory):
    response = signup(client, files={"profile_image": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "profile_image"
    with session_factory() as session:
        assert session.query(Employee).count() == 0


def test_signup_rejects_oversized_image(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 16)

    response = signup(client, files={"profile_image": ("me.png", PNG_BYTES, "image/png")})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "profile_image"


def test_failed_signup_discards_stored_image(client):
    assert signup(client).status_code == 201
    before = set(Path(settings.UPLOAD_DIR).iterdir())

    response = signup(
        client,
        identification_number="OTHER-ID",
        files={"profile_image": ("me.png", PNG_BYTES, "image/png")},
    )

    assert response.status_code == 400
    assert set(Path(settings.UPLOAD_DIR).iterdir()) == before


def test_profile_returns_authenticated_employee(client):
    body = signup(client).json()

    response = client.get("/profile", headers=auth_header(body["token"]))

    assert response.status_code == 200
    assert response.json()["data"] == body["data"]


def test_profile_requires_token(client):
    response = client.get("/profile")

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_profile_rejects_invalid_token(client):
    response = client.get("/profile", headers=auth_header("not.a.token"))

    assert response.status_code == 401
    assert response.json()["error"] == "InvalidToken"


def test_profile_rejects_expired_token(client):
    employee_id = signup(client).json()["data"]["id"]
    token = issue_employee_token(employee_id, expires_delta=timedelta(seconds=-10))

    response = client.get("/profile", headers=auth_header(token))

    assert response.status_code == 401
    assert response.json()["error"] == "TokenExpired"


def test_profile_rejects_token_of_deleted_employee(client, session_factory):
    body = signup(client).json()
    with session_factory() as session:
        session.query(Employee).filter(Employee.id == body["data"]["id"]).delete()
        session.commit()

    response = client.get("/profile", headers=auth_header(body["token"]))

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
