import logging
import time

import requests

from .errors import UpstreamFetchFailure

logger = logging.getLogger(__name__)

CHUNK_SIZE = 128 * 1024


def fetch_pdf(url: str, timeout: float = 30.0, max_bytes: int | None = None) -> bytes:
    """GET `url` and return the raw body.

    • `timeout` bounds the whole download, not just each socket read
    • raises UpstreamFetchFailure on a non-2xx status or when the body passes max_bytes
    • transport errors (DNS, refused, TLS, timeout) propagate as requests exceptions
    """
    deadline = time.monotonic() + timeout
    with requests.get(url, stream=True, timeout=timeout) as r:
        if not 200 <= r.status_code < 300:
            logger.warning("Upstream answered HTTP %s for %s", r.status_code, url)
            raise UpstreamFetchFailure.from_status(r.status_code)

        buf = bytearray()
        for chunk in r.iter_content(CHUNK_SIZE):
            if time.monotonic() > deadline:
                logger.warning("Download from %s took longer than %ss, aborting", url, timeout)
                raise requests.Timeout(f"Download of {url} took longer than {timeout}s")
            if not chunk:
                continue
            buf += chunk
            if max_bytes is not None and len(buf) > max_bytes:
                logger.warning("Download from %s passed %d bytes, aborting", url, max_bytes)
                raise UpstreamFetchFailure(f"Failed to fetch PDF: larger than {max_bytes} bytes")

    return bytes(buf)
