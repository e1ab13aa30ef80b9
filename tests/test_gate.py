from datetime import datetime, timedelta, UTC
import pytest
from jose import jwt
from taskdesk.config import ALGORITHM, SECRET_KEY
from taskdesk.utils.auth import create_token
from taskdesk.utils.errors import (
    CredentialExpired,
    Forbidden,
    InvalidCredential,
    MalformedCredential,
    PrincipalNotFound,
    Unauthenticated,
)
from taskdesk.utils.gate import (
    ADMIN_ONLY,
    AUTHENTICATED,
    GateContext,
    Principal,
    extract_bearer,
    require_admin,
    run_gate,
    verify_credential,
)


def _exp(minutes):
    return int((datetime.now(UTC) + timedelta(minutes=minutes)).timestamp())


class TestExtractBearer:
    @pytest.mark.parametrize("header", [None, ""])
    def test_missing_header(self, header):
        with pytest.raises(Unauthenticated):
            extract_bearer(GateContext(authorization=header))

    @pytest.mark.parametrize("header", ["Token abc", "bearer abc", "Basic dXNlcjpwdw=="])
    def test_wrong_scheme(self, header):
        with pytest.raises(MalformedCredential):
            extract_bearer(GateContext(authorization=header))

    @pytest.mark.parametrize("header", ["Bearer ", "Bearer    ", "Bearer"])
    def test_empty_token(self, header):
        with pytest.raises(Unauthenticated) as exc:
            extract_bearer(GateContext(authorization=header))
        assert exc.value.detail == "No token provided"

    def test_token_extracted(self):
        ctx = extract_bearer(GateContext(authorization="Bearer abc.def.ghi"))
        assert ctx.token == "abc.def.ghi"


class TestVerifyCredential:
    def test_valid_token_yields_user_id(self):
        ctx = verify_credential(GateContext(authorization=None, token=create_token(42)))
        assert ctx.user_id == 42

    def test_expired(self):
        with pytest.raises(CredentialExpired):
            verify_credential(GateContext(authorization=None, token=create_token(42, expires_minutes=-5)))

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "42", "exp": _exp(10)}, "some-other-key", algorithm=ALGORITHM)
        with pytest.raises(InvalidCredential):
            verify_credential(GateContext(authorization=None, token=token))

    def test_garbage(self):
        with pytest.raises(InvalidCredential):
            verify_credential(GateContext(authorization=None, token="not-a-jwt"))

    @pytest.mark.parametrize("claims", [
        {"exp": "soon"},  # no subject
        {"sub": "abc", "exp": "soon"},
        {"sub": "42"},  # no expiry
    ])
    def test_bad_payload(self, claims):
        if claims.get("exp") == "soon":
            claims = dict(claims, exp=_exp(10))
        token = jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(InvalidCredential):
            verify_credential(GateContext(authorization=None, token=token))

    @pytest.mark.parametrize("sub", ["0", "-3", "1" + "0" * 30])
    def test_subject_out_of_id_range(self, sub):
        token = jwt.encode({"sub": sub, "exp": _exp(10)}, SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(InvalidCredential):
            verify_credential(GateContext(authorization=None, token=token))


class TestPipeline:
    def test_resolves_principal(self, db, signup):
        user, headers = signup("frank")
        principal = run_gate(AUTHENTICATED, GateContext(authorization=headers["Authorization"], db=db))
        assert principal == Principal(id=user["id"], username="frank", email="frank@example.com", role="user")

    def test_unknown_user(self, db):
        token = create_token(999_999)
        with pytest.raises(PrincipalNotFound):
            run_gate(AUTHENTICATED, GateContext(authorization=f"Bearer {token}", db=db))

    def test_admin_pipeline_rejects_plain_user(self, db, signup):
        _, headers = signup()
        with pytest.raises(Forbidden):
            run_gate(ADMIN_ONLY, GateContext(authorization=headers["Authorization"], db=db))

    def test_admin_pipeline_accepts_admin(self, db, signup, promote):
        user, headers = signup()
        promote(user["id"])
        principal = run_gate(ADMIN_ONLY, GateContext(authorization=headers["Authorization"], db=db))
        assert principal.is_admin

    def test_require_admin_runs_after_resolution(self):
        ctx = GateContext(authorization=None, principal=Principal(1, "u", "u@example.com", "user"))
        with pytest.raises(Forbidden):
            require_admin(ctx)


class TestGateOverHttp:
    def test_no_header(self, client):
        r = client.get("/api/tasks")
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": "No authentication token, access denied"}

    def test_malformed_header(self, client):
        r = client.get("/api/tasks", headers={"Authorization": "Token abc"})
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid token format. Use Bearer token"

    def test_expired_token(self, client, signup):
        user, _ = signup()
        token = create_token(user["id"], expires_minutes=-1)
        r = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
        assert r.json()["message"] == "Token has expired"

    def test_invalid_token(self, client):
        r = client.get("/api/tasks", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401
        assert r.json()["message"] == "Token is not valid"

    def test_token_for_missing_user(self, client):
        r = client.get("/api/tasks", headers={"Authorization": f"Bearer {create_token(12345)}"})
        assert r.status_code == 401
        assert r.json()["message"] == "User not found"

    def test_oversized_subject(self, client):
        r = client.get("/api/tasks", headers={"Authorization": f"Bearer {create_token(10**30)}"})
        assert r.status_code == 401
        assert r.json()["message"] == "Token is not valid"

    def test_expiry_read_at_call_time(self, client, signup, monkeypatch):
        import taskdesk.config
        user, _ = signup()
        monkeypatch.setattr(taskdesk.config, "ACCESS_TOKEN_EXPIRE_MINUTES", -1)
        token = create_token(user["id"])
        r = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 401
