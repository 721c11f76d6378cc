"""Site controllers.

``AcmeController`` and ``DdnsController`` answer with one-word plain-text
status codes (``good``, ``badauth``, ``nodata``, ``nohost``) so that shell
hooks and routers can act on them without parsing.
"""

import logging
from typing import Any

from wren.components import FlashComponent, HtmlComponent
from wren.controller import Controller

from dnsproxy.config import SiteConfig
from dnsproxy.cpanel import CPanelApi

logger = logging.getLogger("dnsproxy.controllers")

AUTH_REALM = 'Basic realm="ACME DNS proxy", charset="UTF-8"'


class SiteController(Controller):
    """Common base: flash messages, page assets, no redirects for ajax."""

    def initialize(self) -> None:
        self.add_component(FlashComponent(self.session))
        self.add_component(HtmlComponent()).meta({"name": "robots", "content": "noindex"})

    def before_redirect(self, url: Any) -> bool:
        if not super().before_redirect(url):
            return False
        return not self.request.is_ajax


class HomeController(SiteController):
    def index_action(self) -> None:
        self.set("title", "DNS proxy")
        self.set(
            "endpoints",
            [
                self._endpoint("POST", controller="acme", action="present"),
                self._endpoint("POST", controller="acme", action="cleanup"),
                self._endpoint("GET", controller="ddns", action="update", hostname="host.example.com"),
            ],
        )

    def _endpoint(self, method: str, **params: Any) -> dict[str, str]:
        # The home route pins ".html"; API links must not inherit it.
        return {"method": method, "url": self.url.build({**params, "extension": None})}


class ApiController(SiteController):
    """Plain-text API endpoints guarded by the cPanel credentials."""

    def initialize(self) -> None:
        super().initialize()
        self.disable_autorender()
        self.site = self.app.resolve(SiteConfig)
        self.api = self.app.resolve(CPanelApi)
        self.response.set_content_type("text/plain; charset=utf-8")

    def reply(self, status: str) -> None:
        self.response.set_body(status)

    def authorized(self) -> bool:
        """Check Basic auth; on failure answer 401 ``badauth``."""
        if self.site.accepts(self.request.basic_auth):
            return True
        logger.info("Rejected credentials from %s for %s", self.request.client_address, self.request.path)
        self.response.set_status(401).set_header("WWW-Authenticate", AUTH_REALM)
        self.reply("badauth")
        return False


class AcmeController(ApiController):
    """DNS-01 challenge hooks: JSON body ``{"fqdn": ..., "value": ...}``."""

    def _challenge(self) -> tuple[str, str, str] | None:
        data = self.request.json(strict=False)
        if not isinstance(data, dict) or not data.get("fqdn") or not data.get("value"):
            self.reply("nodata")
            return None
        fqdn, value = str(data["fqdn"]), str(data["value"])
        zone = self.api.find_zone(fqdn)
        if zone is None:
            self.reply("nohost")
            return None
        return zone, fqdn, value

    def present_action(self) -> None:
        if not self.authorized():
            return
        challenge = self._challenge()
        if challenge is None:
            return
        zone, fqdn, value = challenge
        self.api.add_record({"domain": zone, "name": fqdn, "type": "TXT", "txtdata": value, "ttl": 1})
        logger.info("Added TXT %s in %s", fqdn, zone)
        self.reply("good")

    def cleanup_action(self) -> None:
        if not self.authorized():
            return
        challenge = self._challenge()
        if challenge is None:
            return
        zone, fqdn, value = challenge
        records = self.api.fetch_zone_records({"domain": zone, "name": fqdn, "type": "TXT", "txtdata": value})
        for record in records:
            self.api.remove_record(record)
        logger.info("Removed %d TXT record(s) %s in %s", len(records), fqdn, zone)
        self.reply("good")


class DdnsController(ApiController):
    """Dynamic DNS: point every A record of ``hostname`` at ``ip``."""

    def update_action(self, hostname: str | None, ip: str | None = None) -> None:
        if not self.authorized():
            return
        zone = self.api.find_zone(hostname) if hostname else None
        if zone is None:
            self.reply("nohost")
            return
        address = ip or self.request.client_address
        records = self.api.fetch_zone_records({"domain": zone, "name": hostname, "type": "A"})
        for record in records:
            record["address"] = address
            self.api.edit_record(record)
        logger.info("Pointed %d A record(s) %s at %s", len(records), hostname, address)
        self.reply("good")
