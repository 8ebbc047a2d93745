from __future__ import annotations

import pytest

from src.beadle_system.beadle_system.main import create_app


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app({"DB_PATH": str(tmp_path / "api.db"), "TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def container(app):
    return app.extensions["beadle_container"]


@pytest.fixture
def auth_header(container):
    """Create an account holding ``roles`` and return a Bearer header for it."""

    counter = {"n": 0}

    def _make(*roles):
        counter["n"] += 1
        email = f"api{counter['n']}@campioncollege.com"
        uid = container.auth_service.sign_up(email=email, password="secret123", full_name=f"Api {counter['n']}")
        if roles:
            container.role_service.set_roles(uid, list(roles))
        token = container.auth_service.sign_in(email, "secret123").token
        return uid, {"Authorization": f"Bearer {token}"}

    return _make


def test_signup_login_profile_logout_with_cookie(client):
    resp = client.post(
        "/api/auth/signup",
        json={"email": "flow@campioncollege.com", "password": "secret123", "full_name": "Flow"},
    )
    assert resp.status_code == 201

    resp = client.post("/api/auth/login", json={"email": "flow@campioncollege.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.get_json()["roles"] == ["student"]
    cookie = client.get_cookie("session_token")
    assert cookie is not None and cookie.http_only

    profile = client.get("/api/profile").get_json()["profile"]
    assert profile["email"] == "flow@campioncollege.com"
    assert profile["roles"] == ["student"]

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/profile").status_code == 401


def test_login_failure(client):
    resp = client.post("/api/auth/login", json={"email": "x@campioncollege.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid email or password"


def test_unauthenticated_is_401(client):
    resp = client.get("/api/users/list")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Not authenticated"}


def test_student_cannot_manage_roles(client, auth_header):
    _, headers = auth_header()
    resp = client.get("/api/users/list", headers=headers)

    assert resp.status_code == 403
    body = resp.get_json()
    assert body["required_roles"] == ["tech_team", "admin", "super_admin"]
    assert "Required roles: tech_team, admin, super_admin" in body["error"]


def test_tech_team_manages_roles(client, container, auth_header):
    tech_id, tech = auth_header("tech_team")
    target, _ = auth_header()

    resp = client.post(f"/api/users/{target}/roles", json={"role": "staff"}, headers=tech)
    assert resp.get_json() == {"success": True, "message": "Role added successfully"}

    resp = client.post("/api/users/update-roles", json={"userId": target, "roles": ["admin", "bogus_role"]}, headers=tech)
    assert resp.status_code == 400
    assert resp.get_json()["missing_role"] == "bogus_role"
    assert set(container.role_service.role_names_of(target)) == {"student", "staff"}

    resp = client.post("/api/users/update-roles", json={"userId": target, "roles": []}, headers=tech)
    assert resp.status_code == 200
    assert container.role_service.role_names_of(target) == ["student"]

    resp = client.delete(f"/api/users/{target}/roles/student", headers=tech)
    assert resp.status_code == 200
    assert container.role_service.role_names_of(target) == ["student"]

    listed = client.get("/api/users/list", headers=tech).get_json()["users"]
    assert {u["id"] for u in listed} >= {tech_id, target}


def test_update_roles_rejects_bad_payload(client, auth_header):
    _, admin = auth_header("admin")
    assert client.post("/api/users/update-roles", json={"roles": ["staff"]}, headers=admin).status_code == 400
    assert client.post("/api/users/update-roles", json={"userId": 1, "roles": "staff"}, headers=admin).status_code == 400


def test_missing_user_is_404(client, auth_header):
    _, admin = auth_header("admin")
    assert client.post("/api/users/9999/roles", json={"role": "staff"}, headers=admin).status_code == 404


def test_supervisor_toggles_beadle(client, container, auth_header):
    _, supervisor = auth_header("supervisor", "supervisor_5")
    student, _ = auth_header()

    resp = client.post(f"/api/users/{student}/beadle", headers=supervisor)
    assert resp.get_json()["is_beadle"] is True
    assert container.role_service.has_role(student, "beadle")

    resp = client.post(f"/api/users/{student}/beadle", json={"enabled": False}, headers=supervisor)
    assert resp.get_json()["is_beadle"] is False
    assert container.role_service.role_names_of(student) == ["student"]


def test_roles_catalog_endpoint(client, auth_header):
    _, headers = auth_header()
    subs = client.get("/api/roles?type=sub", headers=headers).get_json()["roles"]
    assert all(r["role_type"] == "sub" for r in subs)
    assert client.get("/api/roles?type=weird", headers=headers).status_code == 400


def test_access_endpoint(client, auth_header):
    _, headers = auth_header("admin")

    body = client.get("/api/access?roles=admin,supervisor&mode=all", headers=headers).get_json()
    assert body["allowed"] is False
    assert body["reason"] == "insufficient permission"

    body = client.get("/api/access?roles=member&mode=any", headers=headers).get_json()
    assert body["allowed"] is False
    assert body["required_roles"] == ["member"]

    body = client.get("/api/access?roles=member,admin&mode=any", headers=headers).get_json()
    assert body["allowed"] is True

    body = client.get("/api/access?roles=admin", headers=headers).get_json()
    assert body["allowed"] is True

    body = client.get("/api/access?roles=admin").get_json()
    assert body["reason"] == "not authenticated"

    assert client.get("/api/access?mode=some", headers=headers).status_code == 400


def test_slip_flow(client, auth_header):
    _, beadle = auth_header("student", "beadle")
    _, supervisor = auth_header("supervisor", "supervisor_5")
    _, other_supervisor = auth_header("supervisor", "supervisor_4")

    payload = {
        "grade_level": "5th Form",
        "class_name": "5B",
        "date": "2026-03-02",
        "class_start_time": "08:00",
        "teacher": "Mr. Brown",
        "subject": "Mathematics",
        "teacher_present": "yes",
        "homework_given": "no",
        "students_present": 27,
        "absent_students": ["Jane Doe"],
        "late_students": ["Carl Dee"],
    }
    resp = client.post("/api/slips", json=payload, headers=beadle)
    assert resp.status_code == 201

    mine = client.get("/api/slips/mine", headers=beadle).get_json()["slips"]
    assert mine[0]["class_end_time"] == "08:35"

    assert client.post("/api/slips", json=payload, headers=supervisor).status_code == 403

    listed = client.get("/api/slips?date=2026-03-02", headers=supervisor).get_json()["slips"]
    assert len(listed) == 1
    assert client.get("/api/slips", headers=other_supervisor).get_json()["slips"] == []
    assert client.get("/api/slips?form=5th", headers=other_supervisor).status_code == 403

    reports = client.get("/api/slips/reports?date=2026-03-02", headers=supervisor).get_json()["reports"]
    assert reports[0]["grade_level"] == "5th Form"
    assert reports[0]["total_absent"] == 1
    assert reports[0]["total_late"] == 1


def test_slip_validation_error(client, auth_header):
    _, beadle = auth_header("student", "beadle")
    resp = client.post("/api/slips", json={"grade_level": "5th Form", "class_name": "4A"}, headers=beadle)
    assert resp.status_code == 400


def test_class_end_time_endpoint(client, auth_header):
    _, headers = auth_header()
    body = client.get("/api/slips/class-end-time?start=13:00&double=yes", headers=headers).get_json()
    assert body == {"success": True, "end_time": "14:10", "display": "2:10 PM"}
    assert client.get("/api/slips/class-end-time?start=1pm", headers=headers).status_code == 400


def test_production_refuses_placeholder_secret(tmp_path, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("SECRET_KEY", raising=False)
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app({"DB_PATH": str(tmp_path / "prod.db")})


@pytest.mark.parametrize("flag,end", [("no", "08:35"), ("false", "08:35"), (False, "08:35"), ("yes", "09:10")])
def test_double_session_flag_accepts_yes_no(client, auth_header, flag, end):
    _, beadle = auth_header("student", "beadle")
    payload = {
        "grade_level": "5th Form",
        "class_name": "5B",
        "date": "2026-03-02",
        "class_start_time": "08:00",
        "is_double_session": flag,
        "teacher": "Mr. Brown",
        "subject": "Mathematics",
    }
    assert client.post("/api/slips", json=payload, headers=beadle).status_code == 201

    slip = client.get("/api/slips/mine", headers=beadle).get_json()["slips"][0]
    assert slip["is_double_session"] is (end == "09:10")
    assert slip["class_end_time"] == end


def test_double_session_flag_rejects_garbage(client, auth_header):
    _, beadle = auth_header("student", "beadle")
    payload = {
        "grade_level": "5th Form",
        "class_name": "5B",
        "date": "2026-03-02",
        "class_start_time": "08:00",
        "is_double_session": "sometimes",
        "teacher": "Mr. Brown",
        "subject": "Mathematics",
    }
    resp = client.post("/api/slips", json=payload, headers=beadle)
    assert resp.status_code == 400
    assert "Double session" in resp.get_json()["error"]


@pytest.mark.parametrize(
    "method,path,roles",
    [
        ("post", "/api/users/update-roles", ("admin",)),
        ("post", "/api/users/1/roles", ("admin",)),
        ("post", "/api/users/1/beadle", ("admin",)),
        ("post", "/api/slips", ("beadle",)),
        ("post", "/api/profile/update", ()),
        ("post", "/api/profile/change-password", ()),
    ],
)
def test_non_object_json_body_is_400(client, auth_header, method, path, roles):
    _, headers = auth_header(*roles)
    resp = getattr(client, method)(path, json=["not", "an", "object"], headers=headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Invalid request data"}


@pytest.mark.parametrize("path", ["/api/auth/signup", "/api/auth/login"])
def test_non_object_json_body_is_400_before_login(client, path):
    resp = client.post(path, json=[1, 2, 3])
    assert resp.status_code == 400
