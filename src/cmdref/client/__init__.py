"""HTTP client for the cmdref command catalog.

Classes:
    :class:`CatalogClient` -- blocking, session-authenticated client backed
    by :class:`httpx.Client`.

Example::

    from cmdref.client import CatalogClient

    with CatalogClient(settings, SessionStore()) as client:
        item = client.get(3)
"""

from cmdref.client.catalog import CatalogClient

__all__ = ["CatalogClient"]
