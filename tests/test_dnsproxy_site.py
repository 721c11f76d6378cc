"""Tests for the DNS proxy site — controllers, app factory and settings."""

from pathlib import Path
from typing import Any

import pytest

from dnsproxy.app import TEMPLATE_DIR, create_app
from dnsproxy.config import SiteConfig
from dnsproxy.controllers import AUTH_REALM
from dnsproxy.cpanel import CPanelApi
from wren.app import App
from wren.config import AppConfig
from wren.errors import ConfigurationError, UpstreamError
from wren.testing import TestClient

SITE = SiteConfig(cpanel_host="https://cpanel.example.com:2083", cpanel_user="user", cpanel_pass="pass")
AUTH = TestClient.basic_auth("user", "pass")


class FakeApi:
    """In-memory stand-in for CPanelApi."""

    def __init__(self, zones: tuple[str, ...] = ("example.com",)) -> None:
        self.zones = zones
        self.records: list[dict[str, Any]] = []
        self.added: list[dict[str, Any]] = []
        self.edited: list[dict[str, Any]] = []
        self.removed: list[dict[str, Any]] = []
        self.fail = False

    def find_zone(self, fqdn: str) -> str | None:
        name = fqdn.rstrip(".")
        while name:
            if name in self.zones:
                return name
            _, _, name = name.partition(".")
        return None

    def fetch_zone_records(self, record_filter: dict[str, Any]) -> list[dict[str, Any]]:
        keys = [key for key in record_filter if key != "domain"]
        return [
            dict(record)
            for record in self.records
            if all(str(record.get(key, "")).rstrip(".") == str(record_filter[key]).rstrip(".") for key in keys)
        ]

    def add_record(self, record: dict[str, Any]) -> None:
        if self.fail:
            raise UpstreamError("cPanel add_zone_record: Invalid TTL")
        self.added.append(dict(record))

    def edit_record(self, record: dict[str, Any]) -> None:
        self.edited.append(dict(record))

    def remove_record(self, record: dict[str, Any]) -> None:
        self.removed.append(dict(record))


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def app(api: FakeApi) -> App:
    app = create_app(AppConfig(), SITE)
    app.provide(CPanelApi, lambda: api)
    return app


class TestAuth:
    @pytest.mark.parametrize(
        "path",
        ["/acme/present", "/acme/cleanup"],
    )
    async def test_acme_requires_credentials(self, app: App, path: str) -> None:
        async with TestClient(app) as client:
            response = await client.post(path, json={"fqdn": "a.example.com", "value": "v"})
        assert response.status == 401
        assert response.text == "badauth"
        assert response.get_header("www-authenticate") == AUTH_REALM

    async def test_wrong_password(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get(
                "/ddns/update?hostname=home.example.com", headers=TestClient.basic_auth("user", "nope")
            )
        assert response.status == 401
        assert response.text == "badauth"


class TestAcme:
    async def test_present(self, app: App, api: FakeApi) -> None:
        async with TestClient(app) as client:
            response = await client.post(
                "/acme/present",
                headers=AUTH,
                json={"fqdn": "_acme-challenge.www.example.com.", "value": "token123"},
            )
        assert response.status == 200
        assert response.text == "good"
        assert response.content_type == "text/plain; charset=utf-8"
        assert api.added == [
            {
                "domain": "example.com",
                "name": "_acme-challenge.www.example.com.",
                "type": "TXT",
                "txtdata": "token123",
                "ttl": 1,
            }
        ]

    @pytest.mark.parametrize(
        "payload",
        [{"fqdn": "a.example.com"}, {"value": "v"}, ["a.example.com", "v"]],
    )
    async def test_nodata(self, app: App, api: FakeApi, payload: Any) -> None:
        async with TestClient(app) as client:
            response = await client.post("/acme/present", headers=AUTH, json=payload)
        assert response.text == "nodata"
        assert api.added == []

    async def test_invalid_json_is_nodata(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.post("/acme/present", headers=AUTH, body=b"{nope")
        assert response.status == 200
        assert response.text == "nodata"

    async def test_nohost(self, app: App, api: FakeApi) -> None:
        async with TestClient(app) as client:
            response = await client.post("/acme/present", headers=AUTH, json={"fqdn": "a.example.net", "value": "v"})
        assert response.text == "nohost"
        assert api.added == []

    async def test_cleanup_removes_matching(self, app: App, api: FakeApi) -> None:
        api.records = [
            {"line": 1, "name": "_acme-challenge.example.com.", "type": "TXT", "txtdata": "old"},
            {"line": 2, "name": "_acme-challenge.example.com.", "type": "TXT", "txtdata": "token"},
            {"line": 3, "name": "www.example.com.", "type": "A", "address": "1.2.3.4"},
        ]
        async with TestClient(app) as client:
            response = await client.post(
                "/acme/cleanup", headers=AUTH, json={"fqdn": "_acme-challenge.example.com", "value": "token"}
            )
        assert response.text == "good"
        assert [record["line"] for record in api.removed] == [2]

    async def test_upstream_failure(self, app: App, api: FakeApi) -> None:
        api.fail = True
        async with TestClient(app) as client:
            response = await client.post("/acme/present", headers=AUTH, json={"fqdn": "a.example.com", "value": "v"})
        assert response.status == 502


class TestDdns:
    async def test_update_with_ip(self, app: App, api: FakeApi) -> None:
        api.records = [
            {"line": 5, "name": "home.example.com.", "type": "A", "address": "1.1.1.1"},
            {"line": 6, "name": "home.example.com.", "type": "TXT", "txtdata": "x"},
        ]
        async with TestClient(app) as client:
            response = await client.get("/ddns/update?hostname=home.example.com&ip=203.0.113.9", headers=AUTH)
        assert response.text == "good"
        assert api.edited == [{"line": 5, "name": "home.example.com.", "type": "A", "address": "203.0.113.9"}]

    async def test_update_defaults_to_client_address(self, app: App, api: FakeApi) -> None:
        api.records = [{"line": 5, "name": "home.example.com.", "type": "A", "address": "1.1.1.1"}]
        async with TestClient(app, client=("198.51.100.4", 40000)) as client:
            response = await client.get("/ddns/update?hostname=home.example.com", headers=AUTH)
        assert response.text == "good"
        assert api.edited[0]["address"] == "198.51.100.4"

    async def test_missing_hostname(self, app: App, api: FakeApi) -> None:
        async with TestClient(app) as client:
            response = await client.get("/ddns/update", headers=AUTH)
        assert response.text == "nohost"
        assert api.edited == []

    async def test_unknown_zone(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/ddns/update?hostname=home.example.net", headers=AUTH)
        assert response.text == "nohost"


class TestHomePage:
    async def test_renders_endpoints(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.content_type == "text/html; charset=utf-8"
        assert '<meta name="robots" content="noindex">' in response.text
        assert "POST /acme/present" in response.text
        assert "GET /ddns/update?hostname=host.example.com" in response.text

    async def test_controller_only_route(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/home", headers={"accept": "application/json"})
        assert response.status == 200
        assert '"title": "DNS proxy"' in response.text

    async def test_not_found_page(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/nothing/here")
        assert response.status == 404
        assert "<h1>404 Not Found</h1>" in response.text


class TestSiteConfig:
    def test_from_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CPANEL_HOST", "CPANEL_USER", "CPANEL_PASS"):
            monkeypatch.delenv(name, raising=False)
        env = tmp_path / ".env"
        env.write_text("CPANEL_HOST=https://host:2083/\nCPANEL_USER=alice\nCPANEL_PASS=secret\n")
        site = SiteConfig.from_env(env)
        assert site == SiteConfig("https://host:2083", "alice", "secret")

    def test_missing_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CPANEL_HOST", "CPANEL_USER", "CPANEL_PASS"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ConfigurationError, match="CPANEL_HOST"):
            SiteConfig.from_env(tmp_path / "missing.env")

    def test_accepts(self) -> None:
        assert SITE.accepts(("user", "pass"))
        assert not SITE.accepts(("user", "PASS"))
        assert not SITE.accepts(None)


class TestCreateApp:
    def test_templates_from_package(self) -> None:
        app = create_app(AppConfig(template_dir="elsewhere"), SITE)
        assert app.config.template_dir == TEMPLATE_DIR

    def test_routes(self) -> None:
        app = create_app(AppConfig(), SITE)
        assert [route.name for route in app.router.routes] == [
            "default_full_route",
            "default_default_action",
            "default_default_ctrl_action",
        ]

    def test_services(self) -> None:
        app = create_app(AppConfig(), SITE)
        assert app.resolve(SiteConfig) is SITE
        assert app.resolve(CPanelApi).client.host == "https://cpanel.example.com:2083"
