"""Application factory for the DNS proxy site."""

import dataclasses
from pathlib import Path

from wren.app import App
from wren.config import AppConfig
from wren.logs import configure_logging

from dnsproxy.config import SiteConfig
from dnsproxy.controllers import AcmeController, DdnsController, HomeController
from dnsproxy.cpanel import CPanelApi, CPanelClient

TEMPLATE_DIR = Path(__file__).parent / "templates"


def create_app(config: AppConfig | None = None, site: SiteConfig | None = None) -> App:
    """Build the site app.

    Without arguments both configs come from ``.env`` and the process
    environment, and logging is configured from the app config. Templates
    always come from the package.
    """
    if config is None:
        config = AppConfig.from_env()
        configure_logging(config, names=("dnsproxy",))
    config = dataclasses.replace(config, template_dir=TEMPLATE_DIR)
    site = site or SiteConfig.from_env()

    app = App(config)
    app.connect("default_full_route", "{controller}/{action}")
    app.connect("default_default_action", "{controller}", {"action": "index"})
    app.connect(
        "default_default_ctrl_action",
        "",
        {"controller": "home", "action": "index", "extension": ".html"},
    )

    app.register_controller(HomeController)
    app.register_controller(AcmeController)
    app.register_controller(DdnsController)

    app.provide(SiteConfig, lambda: site)
    app.provide(CPanelApi, lambda: CPanelApi(CPanelClient(site.cpanel_host, site.cpanel_user, site.cpanel_pass)))
    return app
