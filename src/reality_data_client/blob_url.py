"""Blob URL composition.

A container URL looks like ``https://account.blob.core.windows.net/<container>?<sas>``.
Blob URLs insert the blob path before the query; the SAS query string is the
only authorization the resulting URL carries, so it is kept verbatim.
"""

from typing import Optional
from urllib.parse import urlsplit


def compose_blob_url(container_url: str, relative_path: Optional[str] = None) -> str:
    """Build the URL of a blob inside a signed container.

    Args:
        container_url: Absolute signed container URL
        relative_path: Blob path within the container, e.g. ``"tileset.json"``

    Returns:
        ``container_url`` unchanged if no path is given, otherwise
        ``<scheme>://<host><container path>/<relative_path>?<signature>``

    Raises:
        ValueError: If container_url is not an absolute URL
    """
    if relative_path is None:
        return container_url

    parts = urlsplit(container_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Invalid container URL: {container_url!r}")

    host = f"{parts.scheme}://{parts.netloc}{parts.path}/"
    query = f"?{parts.query}" if parts.query else ""
    return f"{host}{relative_path}{query}"


__all__ = ["compose_blob_url"]
