"""Remote key download over HTTP(S).

A thin wrapper around ``httpx.Client`` with the timeout, User-Agent and
TLS settings from ``DownloadConfig``. Unlike best-effort metadata fetches,
a key download either lands completely at the destination or raises
``FetchError``; a partial file is never left behind.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from pkgtrust.config import DownloadConfig
from pkgtrust.exceptions import FetchError

logger = logging.getLogger(__name__)


class FileDownloader:
    """Download single URLs to local files.

    Args:
        config: Download settings. Defaults apply when omitted.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: DownloadConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or DownloadConfig()
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._config.timeout,
            headers={"User-Agent": self._config.user_agent},
            follow_redirects=True,
            verify=self._config.sslverify,
            transport=self._transport,
        )

    def download(self, url: str, destination: Path | str) -> None:
        """Fetch ``url`` and write the response body to ``destination``.

        Raises:
            FetchError: On HTTP error statuses, timeouts, or transport
                errors.
        """
        destination = Path(destination)
        logger.info("Downloading %s", url)
        try:
            with self._client() as client, client.stream("GET", url) as resp:
                resp.raise_for_status()
                with destination.open("wb") as out:
                    for chunk in resp.iter_bytes():
                        out.write(chunk)
        except httpx.TimeoutException as exc:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Timeout fetching {url}", url) from exc
        except httpx.HTTPStatusError as exc:
            destination.unlink(missing_ok=True)
            raise FetchError(
                f"HTTP {exc.response.status_code} from {url}", url
            ) from exc
        except httpx.HTTPError as exc:
            destination.unlink(missing_ok=True)
            raise FetchError(f"Request error for {url}: {exc}", url) from exc
        logger.debug("Saved %s to %s", url, destination)
