"""dnsproxy — ACME DNS-01 and dynamic DNS endpoints in front of cPanel.

Exposes two authenticated APIs on top of a cPanel account's zone editor:

- ``/acme/present`` and ``/acme/cleanup`` add and remove the TXT records
  an ACME client needs for DNS-01 challenges.
- ``/ddns/update?hostname=...`` points every A record of a host at the
  caller's (or a given) address.

Run it with ``wren run dnsproxy.app:create_app``.
"""

from dnsproxy.app import create_app

__all__ = ["create_app"]
