from __future__ import annotations

import logging

import requests

from nlp_analyzer.cleaning import split_lines

LOGGER = logging.getLogger(__name__)


class FetchError(IOError):
    """Raised when a document cannot be retrieved or decoded."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url
        self.message = message


def _read_response(session: requests.Session, url: str, timeout: float | None) -> bytes:
    response = session.get(url, timeout=timeout, allow_redirects=True)
    if response.history:
        LOGGER.debug("Followed %d redirect(s) to %s", len(response.history), response.url)
    response.raise_for_status()
    return response.content


def fetch_text(
    url: str,
    *,
    timeout: float | None = None,
    session: requests.Session | None = None,
) -> str:
    """Download ``url`` and return its body decoded as UTF-8.

    Redirects are followed. Line endings are normalized to ``\\n``. Any
    network, HTTP status or decoding problem is raised as :class:`FetchError`.
    """

    LOGGER.info("Fetching %s", url)
    try:
        if session is None:
            with requests.Session() as own_session:
                content = _read_response(own_session, url, timeout)
        else:
            content = _read_response(session, url, timeout)
    except requests.RequestException as exc:
        raise FetchError(url, str(exc)) from exc

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FetchError(url, f"Response is not valid UTF-8: {exc}") from exc

    LOGGER.debug("Fetched %d bytes from %s", len(content), url)
    return "\n".join(split_lines(text))
