from jose import jwt

from rover.services.jwt_service import JWTAuthService


def test_jwt_service_disabled_without_key_material(monkeypatch):
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("JWT_CERTIFICATE", raising=False)

    service = JWTAuthService()

    assert service.enabled is False
    assert service.try_decode("anything") is None


def test_jwt_service_decodes_valid_token(monkeypatch):
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    token = jwt.encode({"sub": "mission-control"}, "test-secret", algorithm="HS256")

    service = JWTAuthService()

    assert service.enabled is True
    assert service.decode_token(token)["sub"] == "mission-control"


def test_jwt_service_try_decode_returns_none_on_invalid(monkeypatch):
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")
    monkeypatch.setenv("JWT_SECRET", "test-secret")

    service = JWTAuthService()
    bad_token = jwt.encode({"sub": "mission-control"}, "other-secret", algorithm="HS256")

    assert service.try_decode(bad_token) is None


def test_jwt_service_accepts_base64_encoded_certificate(monkeypatch):
    import base64

    pem = "-----BEGIN PUBLIC KEY-----\nabc\n-----END PUBLIC KEY-----\n"
    monkeypatch.setenv("JWT_ALGORITHM", "RS256")
    monkeypatch.setenv("JWT_CERTIFICATE", base64.b64encode(pem.encode()).decode())

    service = JWTAuthService()

    assert service.public_key == pem
    assert service.enabled is True


def test_jwt_service_picks_key_by_algorithm_family(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.delenv("JWT_CERTIFICATE", raising=False)

    monkeypatch.setenv("JWT_ALGORITHM", "HS384")
    hmac_service = JWTAuthService()
    token = jwt.encode({"sub": "mission-control"}, "test-secret", algorithm="HS384")

    assert hmac_service.decode_token(token)["sub"] == "mission-control"

    monkeypatch.setenv("JWT_ALGORITHM", "RS256")
    rsa_service = JWTAuthService()

    assert rsa_service.enabled is False
    assert rsa_service.try_decode(token) is None
