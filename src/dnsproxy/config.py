"""Site settings for the cPanel account the proxy edits."""

from dataclasses import dataclass
from pathlib import Path

from wren.config import load_env, require


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """cPanel endpoint and credentials.

    The same user/password pair is what API clients must present with
    HTTP Basic auth.
    """

    cpanel_host: str
    cpanel_user: str
    cpanel_pass: str

    @classmethod
    def from_env(cls, path: str | Path | None = ".env") -> "SiteConfig":
        settings = require(load_env(path), "CPANEL_HOST", "CPANEL_USER", "CPANEL_PASS")
        return cls(
            cpanel_host=settings["CPANEL_HOST"].rstrip("/"),
            cpanel_user=settings["CPANEL_USER"],
            cpanel_pass=settings["CPANEL_PASS"],
        )

    def accepts(self, credentials: tuple[str, str] | None) -> bool:
        """Whether Basic auth ``credentials`` match the cPanel account."""
        return credentials == (self.cpanel_user, self.cpanel_pass)
