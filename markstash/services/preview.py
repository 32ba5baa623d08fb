"""Link previews: fetch a bookmarked page and its WHOIS record, then scrape a
title and image out of the page.

The extraction is a pair of single-pass regular expressions, not an HTML
parser. Nested or malformed markup, entities and relative image URLs are all
returned exactly as they appear in the page.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from markstash.errors import UpstreamFetchError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "MarkstashBot/1.0 (+https://markstash.local)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

TITLE_PLACEHOLDER = "Title placeholder"
IMAGE_PLACEHOLDER = "https://via.placeholder.com/300x200.png?text=No+image"

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)
_IMG_SRC_RE = re.compile(
    r"""<img\b[^>]*?\ssrc\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""",
    re.IGNORECASE,
)


@dataclass
class PageSources:
    html: str
    whois: object


def extract_title(html: str) -> str:
    match = _TITLE_RE.search(html)
    if not match:
        return TITLE_PLACEHOLDER
    return match.group(1)


def extract_image(html: str) -> str:
    match = _IMG_SRC_RE.search(html)
    if not match:
        return IMAGE_PLACEHOLDER
    return next(group for group in match.groups() if group is not None)


def whois_url_for(template: str, link: str) -> str:
    return template.format(url=quote(link, safe=""))


def _normalize_error(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


async def fetch_page(client: httpx.AsyncClient, url: str, max_bytes: int) -> str:
    async with client.stream("GET", url) as response:
        if response.status_code != 200:
            raise UpstreamFetchError(reason=f"page returned {response.status_code}")
        chunks = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if total > max_bytes:
                break
            chunks.append(chunk)
        encoding = response.encoding or "utf-8"
        return b"".join(chunks).decode(encoding, errors="ignore")


async def fetch_whois(client: httpx.AsyncClient, url: str):
    response = await client.get(url)
    if response.status_code != 200:
        raise UpstreamFetchError(reason=f"whois returned {response.status_code}")
    try:
        return response.json()
    except ValueError:
        raise UpstreamFetchError(reason="whois response is not JSON") from None


async def gather_sources(
    link: str,
    whois_url: str,
    timeout: float,
    max_bytes: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PageSources:
    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers=DEFAULT_HEADERS,
        transport=transport,
    ) as client:
        html, whois = await asyncio.wait_for(
            asyncio.gather(
                fetch_page(client, link, max_bytes),
                fetch_whois(client, whois_url),
            ),
            timeout=timeout * 2,
        )
    return PageSources(html=html, whois=whois)


def load_sources(
    link: str,
    whois_template: str,
    timeout: float,
    max_bytes: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PageSources:
    """Fetch the page and WHOIS report together; either failing fails both."""
    whois_url = whois_url_for(whois_template, link)
    try:
        return asyncio.run(
            gather_sources(link, whois_url, timeout, max_bytes, transport=transport)
        )
    except UpstreamFetchError as exc:
        logger.warning("Preview fetch for %s failed: %s", link, exc.reason)
        raise
    except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as exc:
        reason = _normalize_error(exc)
        logger.warning("Preview fetch for %s failed: %s", link, reason)
        raise UpstreamFetchError(reason=reason) from exc


def build_preview(description: str, sources: PageSources) -> dict:
    return {
        "preview": {
            "og:type": "website",
            "og:title": extract_title(sources.html),
            "og:image": extract_image(sources.html),
            "og:description": description,
        },
        "whois": sources.whois,
    }
