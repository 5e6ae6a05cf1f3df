from __future__ import annotations

import http.client
import json
import socket
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from quotedesk.errors import SourceUnavailable


def fetch_text(
    url: str, *, source: str, symbol: str, timeout: float, user_agent: str
) -> str:
    request = Request(
        url,
        headers={
            "User-Agent": user_agent,
            "Accept-Language": "en-US,en;q=0.9",
        },
    )
    try:
        with urlopen(request, timeout=timeout) as response:
            return response.read().decode("utf-8")
    except HTTPError as exc:
        reason = "rate_limited" if exc.code == 429 else f"http_{exc.code}"
        raise SourceUnavailable(source, symbol, reason) from exc
    except (URLError, TimeoutError, socket.timeout) as exc:
        raise SourceUnavailable(source, symbol, f"network: {exc}") from exc
    except (OSError, http.client.HTTPException) as exc:
        raise SourceUnavailable(source, symbol, f"connection: {exc!r}") from exc
    except UnicodeDecodeError as exc:
        raise SourceUnavailable(source, symbol, "undecodable body") from exc


def fetch_json(
    url: str, *, source: str, symbol: str, timeout: float, user_agent: str
) -> Any:
    body = fetch_text(
        url, source=source, symbol=symbol, timeout=timeout, user_agent=user_agent
    )
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise SourceUnavailable(source, symbol, "invalid json") from exc
