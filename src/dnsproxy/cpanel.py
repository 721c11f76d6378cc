"""cPanel API 2 client and the zone-editor calls the proxy needs.

``CPanelClient`` is the transport: one authenticated GET per call against
``/json-api/cpanel``. ``CPanelApi`` speaks the ZoneEdit module on top of
it and normalizes cPanel's nested result envelopes::

    api = CPanelApi(CPanelClient("https://host:2083", "user", "pass"))
    zone = api.find_zone("_acme-challenge.www.example.com")   # "example.com"
    api.add_record({"domain": zone, "name": "www.example.com", "type": "A", "address": "1.2.3.4"})
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from wren.errors import UpstreamError

logger = logging.getLogger("dnsproxy.cpanel")

API_VERSION = 2
DEFAULT_TIMEOUT = 10.0
ZONE_MODULE = "ZoneEdit"

# Bookkeeping fields cPanel returns with each record but rejects on edit.
_RECORD_NOISE = ("Line", "record")


class CPanelClient:
    """Authenticated calls to a cPanel host.

    TLS verification is off: cPanel hosts commonly serve self-signed
    certificates or certificates for another hostname.
    """

    __slots__ = ("_auth", "_transport", "host", "timeout")

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.host = host.rstrip("/")
        self.timeout = timeout
        self._auth = httpx.BasicAuth(username, password)
        self._transport = transport

    def send(self, module: str, function: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Call ``module::function`` and return the ``cpanelresult`` object."""
        query = {
            "cpanel_jsonapi_apiversion": API_VERSION,
            "cpanel_jsonapi_module": module,
            "cpanel_jsonapi_func": function,
            **(params or {}),
        }
        logger.debug("cPanel %s::%s %s", module, function, params or {})
        try:
            with httpx.Client(
                auth=self._auth,
                verify=False,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = client.get(f"{self.host}/json-api/cpanel", params=query)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            msg = f"cPanel answered {exc.response.status_code} to {module}::{function}"
            raise UpstreamError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"cPanel request {module}::{function} failed: {exc}"
            raise UpstreamError(msg) from exc
        except ValueError as exc:
            msg = f"cPanel sent invalid JSON for {module}::{function}"
            raise UpstreamError(msg) from exc

        if not isinstance(payload, dict) or not isinstance(payload.get("cpanelresult"), dict):
            msg = f"cPanel response to {module}::{function} has no cpanelresult"
            raise UpstreamError(msg)
        return payload["cpanelresult"]


class CPanelApi:
    """ZoneEdit operations.

    Every call raises ``UpstreamError`` when cPanel reports a failure,
    either with a global ``error`` or with ``status != 1``.
    """

    __slots__ = ("client",)

    def __init__(self, client: CPanelClient) -> None:
        self.client = client

    def fetch_zones(self) -> dict[str, Any]:
        """Zones of the account, keyed by domain."""
        return self._send("fetchzones").get("zones") or {}

    def fetch_zone_records(self, record_filter: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Records of ``record_filter["domain"]`` matching the other filter keys.

        Each record carries its ``domain`` so it can be passed straight
        back to ``edit_record`` or ``remove_record``.
        """
        results = []
        for record in self._send("fetchzone", record_filter).get("record") or []:
            cleaned = {key: value for key, value in record.items() if key not in _RECORD_NOISE}
            cleaned["domain"] = record_filter["domain"]
            results.append(cleaned)
        return results

    def find_zone(self, fqdn: str) -> str | None:
        """The account zone containing ``fqdn``, found by dropping leading labels."""
        name = fqdn.rstrip(".")
        zones = self.fetch_zones()
        while name:
            if name in zones:
                return name
            _, _, name = name.partition(".")
        return None

    def add_record(self, record: Mapping[str, Any]) -> None:
        self._send("add_zone_record", record)

    def edit_record(self, record: Mapping[str, Any]) -> None:
        self._send("edit_zone_record", record)

    def remove_record(self, record: Mapping[str, Any]) -> None:
        self._send("remove_zone_record", record)

    def _send(self, function: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        params = dict(params or {})
        if params.get("name"):
            params["name"] = str(params["name"]).rstrip(".") + "."

        response = self.client.send(ZONE_MODULE, function, params)
        if "error" in response:
            raise UpstreamError(f"cPanel {function}: {response['error']}")

        data = response.get("data") or [{}]
        result = data[0] if isinstance(data, list) else data
        if isinstance(result.get("result"), dict):
            result = result["result"]

        if result.get("status") != 1:
            raise UpstreamError(f"cPanel {function}: {result.get('statusmsg') or 'request failed'}")
        return result
