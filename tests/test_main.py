import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import pytest

from catalog_images import main
from catalog_images.auth.google_oauth import DriveTokenProvider, build_drive_credentials
from catalog_images.constants.sync import SyncMode
from catalog_images.core.config import Settings
from catalog_images.core.exceptions import ConfigurationError
from catalog_images.models.product_models import SyncRunSummary


def test_settings_read_environment_names(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN", "tok")
    monkeypatch.setenv("USER_ID", "4242")
    monkeypatch.setenv("PER_PAGE", "50")

    settings = Settings(_env_file=None)

    assert settings.access_token == "tok"
    assert settings.store_id == "4242"
    assert settings.per_page == 50
    assert settings.concurrency_limit == 5
    assert settings.store_base_url == "https://api.tiendanube.com/v1/4242"


def test_missing_catalog_settings_are_reported():
    with pytest.raises(ConfigurationError) as exc_info:
        main.check_catalog_settings(Settings(_env_file=None, access_token="", store_id=""))

    assert "access_token" in str(exc_info.value)
    assert "store_id" in str(exc_info.value)


def test_user_agent_must_be_configured(settings):
    settings.user_agent = ""

    with pytest.raises(ConfigurationError) as exc_info:
        main.check_catalog_settings(settings)

    assert "user_agent" in str(exc_info.value)
    assert Settings(_env_file=None).user_agent == ""


def test_run_exits_non_zero_on_missing_configuration(monkeypatch):
    monkeypatch.setattr(main, "get_settings", lambda: Settings(_env_file=None, access_token="", store_id=""))

    async def runner(settings):
        raise AssertionError("must not run")

    assert main.run(SyncMode.DELETE, runner) == 1


def test_run_exits_zero_on_completion(monkeypatch, settings):
    monkeypatch.setattr(main, "get_settings", lambda: settings)

    async def runner(received):
        assert received is settings
        return SyncRunSummary(pages=1, products=2)

    assert main.run(SyncMode.DELETE, runner) == 0


def test_run_exits_non_zero_on_uncaught_error(monkeypatch, settings):
    monkeypatch.setattr(main, "get_settings", lambda: settings)

    async def runner(received):
        raise RuntimeError("catalog exploded")

    assert main.run(SyncMode.DELETE, runner) == 1


def test_upload_requires_drive_credentials(monkeypatch, settings):
    monkeypatch.setattr(main, "get_settings", lambda: settings)

    async def runner(received):
        raise AssertionError("must not run")

    assert main.run(SyncMode.UPLOAD, runner) == 1


def test_drive_credentials_use_naive_utc_expiry():
    expiry = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-3)))
    settings = Settings(
        _env_file=None,
        google_client_id="cid",
        google_client_secret="csecret",
        google_access_token="at",
        google_refresh_token="rt",
        google_token_expiry=expiry,
    )

    credentials = build_drive_credentials(settings)

    assert credentials.expiry == datetime(2030, 1, 1, 15, 0)
    assert credentials.refresh_token == "rt"
    assert credentials.client_id == "cid"


class FakeCredentials:
    def __init__(self, valid):
        self.valid = valid
        self.token = "old"
        self.refreshes = 0

    def refresh(self, request):
        self.refreshes += 1
        self.token = "fresh"
        self.valid = True


@pytest.mark.asyncio
async def test_token_provider_refreshes_once_when_expired():
    credentials = FakeCredentials(valid=False)
    provider = DriveTokenProvider(credentials, request_factory=lambda: None)

    tokens = [await provider.get_token() for _ in range(3)]

    assert tokens == ["fresh", "fresh", "fresh"]
    assert credentials.refreshes == 1


@pytest.mark.asyncio
async def test_token_provider_keeps_valid_token():
    credentials = FakeCredentials(valid=True)
    provider = DriveTokenProvider(credentials, request_factory=lambda: None)

    assert await provider.get_token() == "old"
    assert credentials.refreshes == 0


class TokenEndpoint:
    """Stands in for google.auth.transport.requests.Request and records refresh bodies."""

    def __init__(self):
        self.bodies = []

    def __call__(self, url, method="GET", body=None, headers=None, **kwargs):
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        self.bodies.append({key: values[0] for key, values in parse_qs(body).items()})
        return TokenResponse()


class TokenResponse:
    status = 200
    headers = {}
    data = json.dumps({"access_token": "refreshed", "expires_in": 3600}).encode("utf-8")


def drive_settings(**overrides):
    return Settings(
        _env_file=None,
        google_client_id="cid",
        google_client_secret="csecret",
        google_refresh_token="rt",
        **overrides,
    )


def test_refresh_keeps_granted_scopes_by_default():
    endpoint = TokenEndpoint()
    credentials = build_drive_credentials(drive_settings())

    credentials.refresh(endpoint)

    assert credentials.token == "refreshed"
    assert endpoint.bodies[0]["grant_type"] == "refresh_token"
    assert endpoint.bodies[0]["refresh_token"] == "rt"
    assert "scope" not in endpoint.bodies[0]


def test_refresh_sends_configured_scopes():
    endpoint = TokenEndpoint()
    scope = "https://www.googleapis.com/auth/drive"
    credentials = build_drive_credentials(drive_settings(google_scopes=[scope]))

    credentials.refresh(endpoint)

    assert endpoint.bodies[0]["scope"] == scope
