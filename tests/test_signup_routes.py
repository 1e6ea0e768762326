try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from gmail_connect import main
from gmail_connect.clients import OAuthTokenExchangeError
from gmail_connect.core.config import AppSettings
from gmail_connect.dependencies import clients as client_factories
from gmail_connect.main import app
from gmail_connect.schemas import GoogleProfile, SignupIntent
from gmail_connect.services import ConnectionRecorder, SignupFlowService, StateTokenSigner

pytestmark = pytest.mark.anyio


class DummyOAuthClient:
    def __init__(self) -> None:
        self.states: list[str] = []
        self.codes: list[str] = []
        self.fail_exchange = False

    def build_authorization_url(self, state: str) -> str:
        self.states.append(state)
        return f"https://oauth.example.com/auth?state={state}"

    async def exchange_authorization_code(self, code: str):
        self.codes.append(code)
        if self.fail_exchange:
            raise OAuthTokenExchangeError("invalid_grant")
        return ("access-token", "refresh-token", 3600)

    async def fetch_user_profile(self, access_token: str) -> GoogleProfile:
        return GoogleProfile(id="google-123", email="owner@acme.io")


class RecordingStore:
    def __init__(self) -> None:
        self.rows: list[dict] = []

    async def insert_row(self, row: dict) -> None:
        self.rows.append(row)


class FailingRecorder:
    def __init__(self, error: Exception) -> None:
        self.error = error

    async def record(self, intent, grant):
        raise self.error


class Harness:
    def __init__(self) -> None:
        self.signer = StateTokenSigner("routes-secret")
        self.oauth_client: DummyOAuthClient | None = DummyOAuthClient()
        self.store: RecordingStore | None = RecordingStore()
        self.record_error: Exception | None = None

    def flow(self) -> SignupFlowService:
        return SignupFlowService(signer=self.signer, oauth_client=self.oauth_client)

    def recorder(self):
        if self.record_error is not None:
            return FailingRecorder(self.record_error)
        return ConnectionRecorder(store=self.store)

    def install(self, target) -> None:
        target.dependency_overrides.update(
            {
                client_factories.get_signup_flow_service: self.flow,
                client_factories.get_connection_recorder: self.recorder,
            }
        )


@pytest.fixture()
def harness():
    harness = Harness()
    harness.install(app)
    yield harness
    app.dependency_overrides.clear()


@pytest.fixture()
def app_for_environment(monkeypatch):
    """Build a separate app whose settings carry the given ``APP_ENV``."""

    def _build(environment: str):
        monkeypatch.setenv("APP_ENV", environment)
        settings = AppSettings()
        monkeypatch.setattr(main, "get_settings", lambda: settings)
        return main.create_app()

    return _build


def _client(target=app, *, raise_app_exceptions: bool = True) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=target, raise_app_exceptions=raise_app_exceptions),
        base_url="http://testserver",
    )


def _state_from(location: str) -> str:
    return parse_qs(urlparse(location).query)["state"][0]


async def test_signup_form_is_served(harness):
    async with _client() as client:
        response = await client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert 'name="companyName"' in response.text
    assert 'name="contactEmail"' in response.text


async def test_register_redirects_with_signed_state(harness):
    async with _client() as client:
        response = await client.post(
            "/register", data={"companyName": "Acme", "contactEmail": "a@acme.io"}
        )

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("/auth/google?state=")
    assert harness.signer.verify(_state_from(location)) == SignupIntent(
        company_name="Acme", contact_email="a@acme.io"
    )


@pytest.mark.parametrize(
    "data",
    [
        {"companyName": "Acme"},
        {"contactEmail": "a@acme.io"},
        {"companyName": "   ", "contactEmail": "a@acme.io"},
        {},
    ],
)
async def test_register_requires_both_fields(harness, data):
    async with _client() as client:
        response = await client.post("/register", data=data)

    assert response.status_code == 400
    assert "Informations manquantes" in response.text


async def test_auth_google_redirects_to_consent_screen(harness):
    async with _client() as client:
        register = await client.post(
            "/register", data={"companyName": "Acme", "contactEmail": "a@acme.io"}
        )
        response = await client.get(register.headers["location"])

    assert response.status_code == 302
    assert response.headers["location"].startswith("https://oauth.example.com/auth")
    assert harness.oauth_client.states == [_state_from(register.headers["location"])]


async def test_auth_google_rejects_forged_state(harness):
    async with _client() as client:
        register = await client.post(
            "/register", data={"companyName": "Acme", "contactEmail": "a@acme.io"}
        )
        payload, _ = _state_from(register.headers["location"]).split(".")
        forged = f"{payload}.{'A' * 43}"
        response = await client.get("/auth/google", params={"state": forged})

    assert response.status_code == 400
    assert "Lien expiré ou invalide" in response.text
    assert harness.oauth_client.states == []


async def test_auth_google_requires_state(harness):
    async with _client() as client:
        response = await client.get("/auth/google")

    assert response.status_code == 400
    assert "Requête invalide" in response.text


async def test_auth_google_without_provider_configuration(harness):
    harness.oauth_client = None
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client() as client:
        response = await client.get("/auth/google", params={"state": state})

    assert response.status_code == 500
    assert "Configuration Google manquante" in response.text


async def test_callback_records_connection_and_renders_success(harness):
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client() as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 200
    assert "Accès accordé" in response.text
    assert "Acme" in response.text
    assert "owner@acme.io" in response.text
    assert "bien été enregistrée" in response.text
    (row,) = harness.store.rows
    assert row == {
        "company_name": "Acme",
        "contact_email": "a@acme.io",
        "google_user_id": "google-123",
        "google_email": "owner@acme.io",
        "access_token": "access-token",
        "refresh_token": "refresh-token",
        "expiry_date": row["expiry_date"],
    }
    assert isinstance(row["expiry_date"], int)


async def test_callback_succeeds_without_configured_store(harness):
    harness.store = None
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client() as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 200
    assert "Accès accordé" in response.text
    assert "bien été enregistrée" not in response.text


async def test_callback_escapes_company_name(harness):
    intent = SignupIntent(company_name="<script>x</script>", contact_email="a@acme.io")
    state = harness.signer.mint(intent)

    async with _client() as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 200
    assert "<script>x</script>" not in response.text
    assert "&lt;script&gt;" in response.text


async def test_callback_without_code_is_rejected(harness):
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client() as client:
        response = await client.get(
            "/auth/google/callback", params={"state": state, "error": "access_denied"}
        )

    assert response.status_code == 400
    assert "Autorisation refusée" in response.text
    assert harness.oauth_client.codes == []


async def test_callback_with_invalid_state_is_rejected(harness):
    async with _client() as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": "tampered.state"}
        )

    assert response.status_code == 400
    assert "Lien expiré ou invalide" in response.text
    assert harness.oauth_client.codes == []
    assert harness.store.rows == []


async def test_callback_exchange_failure_renders_error(harness):
    harness.oauth_client.fail_exchange = True
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client() as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 500
    assert "Erreur pendant la connexion" in response.text
    assert "invalid_grant" not in response.text
    assert harness.store.rows == []


async def test_legal_page_is_served(harness):
    async with _client() as client:
        response = await client.get("/mentions-legales")

    assert response.status_code == 200
    assert "Mentions légales" in response.text


async def test_unknown_route_renders_not_found_page(harness):
    async with _client() as client:
        response = await client.get("/does-not-exist")

    assert response.status_code == 404
    assert "Page introuvable" in response.text


async def test_static_assets_and_health(harness):
    async with _client() as client:
        stylesheet = await client.get("/static/styles.css")
        health = await client.get("/health")

    assert stylesheet.status_code == 200
    assert health.json() == {"status": "ok"}


async def test_unhandled_error_renders_generic_page(harness, app_for_environment):
    target = app_for_environment("production")
    harness.install(target)
    harness.record_error = RuntimeError("recorder exploded")
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client(target, raise_app_exceptions=False) as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 500
    assert "Erreur inattendue" in response.text
    assert "recorder exploded" not in response.text
    assert "Accès accordé" not in response.text


async def test_development_mode_shows_unhandled_error_detail(harness, app_for_environment):
    target = app_for_environment("development")
    harness.install(target)
    harness.record_error = RuntimeError("recorder exploded")
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client(target, raise_app_exceptions=False) as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 500
    assert "Erreur inattendue" in response.text
    assert "recorder exploded" in response.text


async def test_development_mode_shows_provider_error_detail(harness, app_for_environment):
    target = app_for_environment("development")
    harness.install(target)
    harness.oauth_client.fail_exchange = True
    state = harness.signer.mint(SignupIntent(company_name="Acme", contact_email="a@acme.io"))

    async with _client(target) as client:
        response = await client.get(
            "/auth/google/callback", params={"code": "auth-code", "state": state}
        )

    assert response.status_code == 500
    assert "Erreur pendant la connexion" in response.text
    assert "invalid_grant" in response.text


async def test_missing_signing_secret_renders_configuration_page(
    monkeypatch, app_for_environment
):
    target = app_for_environment("production")
    for key in ("STATE_SECRET", "SESSION_SECRET", "GOOGLE_CLIENT_SECRET"):
        monkeypatch.delenv(key, raising=False)
    settings = AppSettings()
    monkeypatch.setattr(client_factories, "_settings", lambda: settings)
    client_factories.get_state_signer.cache_clear()

    try:
        async with _client(target) as client:
            response = await client.post(
                "/register", data={"companyName": "Acme", "contactEmail": "a@acme.io"}
            )
    finally:
        client_factories.get_state_signer.cache_clear()

    assert response.status_code == 500
    assert "Configuration manquante" in response.text
    assert "STATE_SECRET" not in response.text
