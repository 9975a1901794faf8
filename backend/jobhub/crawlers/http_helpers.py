from __future__ import annotations
from typing import Any

from bs4 import BeautifulSoup
import httpx

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Accept": "application/json",
}


async def fetch_json(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 20,
) -> tuple[int, Any]:
    """GET a JSON endpoint. Returns (status, payload); payload is None for non-2xx or a non-JSON body."""
    merged = {**DEFAULT_HEADERS, **(headers or {})}
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, headers=merged) as client:
        resp = await client.get(url, params=params)
        if not resp.is_success:
            return resp.status_code, None
        try:
            return resp.status_code, resp.json()
        except ValueError:
            return resp.status_code, None


def html_to_text(html: str) -> str:
    if "<" not in html:
        return " ".join(html.split())
    soup = BeautifulSoup(html, "html.parser")
    return " ".join(soup.get_text(" ", strip=True).split())


def matches_query(query: str, *fields: str | None) -> bool:
    """Case-insensitive match of the whole query, or any of its tokens, against the given fields."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystack = " ".join(f for f in fields if f).lower()
    if needle in haystack:
        return True
    return any(token in haystack for token in needle.split() if len(token) > 1)
