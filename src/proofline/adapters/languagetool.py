"""LanguageTool HTTP client.

Posts the flattened document text to a LanguageTool server's ``check``
endpoint and turns the JSON answer into ``Match`` objects. Failures of any
kind surface as ``TransportFailure``; nothing is retried here.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.model import Match
from ..errors import TransportFailure

logger = logging.getLogger(__name__)

CHECK_ENDPOINT = "check"
DEFAULT_LANGUAGE = "auto"


def check_url(api_url: str) -> str:
    """Join the configured API base with the check endpoint."""
    if api_url.rstrip("/").endswith("/" + CHECK_ENDPOINT):
        return api_url
    if not api_url.endswith("/"):
        api_url += "/"
    return api_url + CHECK_ENDPOINT


def parse_match(raw: Any) -> Match | None:
    """
    Build a Match from one entry of the response's ``matches`` list.

    Returns None for zero-length matches, which cannot be drawn.
    Raises TransportFailure if the entry is not shaped like a match.
    """
    if not isinstance(raw, dict):
        raise TransportFailure(f"Malformed match entry: {raw!r}")
    try:
        offset = int(raw["offset"])
        length = int(raw["length"])
    except (KeyError, TypeError, ValueError) as e:
        raise TransportFailure(f"Match without usable offset/length: {raw!r}") from e

    if offset < 0:
        raise TransportFailure(f"Match with negative offset: {offset}")
    if length < 1:
        logger.debug("Skipping zero-length match at offset %d", offset)
        return None

    rule = raw.get("rule") or {}
    replacements = tuple(
        r["value"] for r in raw.get("replacements") or [] if isinstance(r, dict) and "value" in r
    )
    return Match(
        offset=offset,
        length=length,
        category=str(rule.get("issueType") or "uncategorized"),
        id=str(rule.get("id") or ""),
        message=str(raw.get("message") or ""),
        replacements=replacements,
        payload=raw,
    )


def parse_response(data: Any) -> list[Match]:
    if not isinstance(data, dict) or not isinstance(data.get("matches"), list):
        raise TransportFailure("Response has no 'matches' list")
    matches = []
    for raw in data["matches"]:
        match = parse_match(raw)
        if match is not None:
            matches.append(match)
    return matches


class LanguageToolClient:
    """Client for the LanguageTool ``check`` endpoint."""

    def __init__(
        self,
        api_url: str,
        language: str = DEFAULT_LANGUAGE,
        timeout_seconds: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            api_url: Base URL of the LanguageTool API, e.g. ``http://localhost:8081/v2/``.
            language: Language code passed through to the server.
            timeout_seconds: Request timeout; None waits indefinitely.
            http_client: Optional httpx.Client for dependency injection (testing).
        """
        self.url = check_url(api_url)
        self.language = language
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    def check(self, text: str) -> list[Match]:
        """Analyze `text` and return its matches in server order."""
        form = {
            "text": text,
            "language": self.language,
            "enabledOnly": "false",
        }
        headers = {"Accept": "application/json"}

        client = self._http_client
        should_close = False
        if client is None:
            client = httpx.Client(timeout=self.timeout_seconds)
            should_close = True
        try:
            response = client.post(self.url, data=form, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise TransportFailure(
                f"LanguageTool returned HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise TransportFailure(f"LanguageTool request failed: {e}") from e
        except ValueError as e:
            raise TransportFailure("LanguageTool returned invalid JSON") from e
        finally:
            if should_close:
                client.close()

        matches = parse_response(data)
        logger.debug("LanguageTool returned %d matches for %d chars", len(matches), len(text))
        return matches
