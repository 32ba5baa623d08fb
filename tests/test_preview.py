import httpx
import pytest

from markstash.errors import UpstreamFetchError
from markstash.services.preview import (
    IMAGE_PLACEHOLDER,
    TITLE_PLACEHOLDER,
    PageSources,
    build_preview,
    extract_image,
    extract_title,
    load_sources,
    whois_url_for,
)

WHOIS_TEMPLATE = "https://whois.test/lookup?url={url}"


def test_extract_title_is_case_insensitive_and_verbatim():
    html = "<html><HEAD><TITLE>Fish &amp; Chips</Title></HEAD></html>"

    assert extract_title(html) == "Fish &amp; Chips"


def test_extract_title_uses_first_title_only():
    html = "<title>First</title><svg><title>Second</title></svg>"

    assert extract_title(html) == "First"


def test_extract_title_spans_lines():
    assert extract_title("<title>\n  Multi\n  line\n</title>") == "\n  Multi\n  line\n"


def test_extract_title_falls_back_to_placeholder():
    html = "<html><body>No title here</body></html>"
    assert extract_title(html) == TITLE_PLACEHOLDER


@pytest.mark.parametrize(
    ("html", "expected"),
    [
        ('<img src="/a.png" alt="a">', "/a.png"),
        (
            "<IMG alt='logo' class=\"x\" SRC='https://cdn.test/logo.svg'>",
            "https://cdn.test/logo.svg",
        ),
        ("<img width=10 src=pixel.gif>", "pixel.gif"),
        ('<img data-src="lazy.png" src="real.png">', "real.png"),
        ('<img alt="none"><img src="second.png">', "second.png"),
        ('<img src="a.png?x=1&amp;y=2">', "a.png?x=1&amp;y=2"),
    ],
)
def test_extract_image_reads_first_src_in_any_attribute_position(html, expected):
    assert extract_image(html) == expected


def test_extract_image_falls_back_to_placeholder():
    assert extract_image("<p>text only</p><imgsrc='x.png'>") == IMAGE_PLACEHOLDER


def test_whois_url_encodes_link():
    url = whois_url_for(WHOIS_TEMPLATE, "https://example.com/a?b=c")

    assert url == "https://whois.test/lookup?url=https%3A%2F%2Fexample.com%2Fa%3Fb%3Dc"


def test_build_preview_shapes_open_graph_payload():
    sources = PageSources(html="<p>nothing</p>", whois={"registrar": "Example"})

    payload = build_preview("Saved for later", sources)

    assert payload == {
        "preview": {
            "og:type": "website",
            "og:title": TITLE_PLACEHOLDER,
            "og:image": IMAGE_PLACEHOLDER,
            "og:description": "Saved for later",
        },
        "whois": {"registrar": "Example"},
    }


def _transport(page_status=200, whois_status=200, whois_body=None):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.host)
        if request.url.host == "whois.test":
            if whois_body is not None:
                return httpx.Response(whois_status, text=whois_body)
            return httpx.Response(
                whois_status,
                json={"query": request.url.params["url"], "registrar": "Example"},
            )
        return httpx.Response(
            page_status,
            html="<title>Example Domain</title><img src='/hero.jpg'>",
        )

    return httpx.MockTransport(handler), seen


def test_load_sources_fetches_page_and_whois():
    transport, seen = _transport()

    sources = load_sources(
        "https://example.com/",
        WHOIS_TEMPLATE,
        timeout=1.0,
        max_bytes=10_000,
        transport=transport,
    )

    assert sorted(seen) == ["example.com", "whois.test"]
    assert extract_title(sources.html) == "Example Domain"
    assert sources.whois == {"query": "https://example.com/", "registrar": "Example"}


def test_load_sources_truncates_large_pages():
    transport, _ = _transport()

    sources = load_sources(
        "https://example.com/",
        WHOIS_TEMPLATE,
        timeout=1.0,
        max_bytes=10,
        transport=transport,
    )

    assert len(sources.html) <= 10


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page_status": 404},
        {"whois_status": 500},
        {"whois_body": "<html>not json</html>"},
    ],
)
def test_load_sources_fails_when_either_fetch_fails(kwargs):
    transport, _ = _transport(**kwargs)

    with pytest.raises(UpstreamFetchError):
        load_sources(
            "https://example.com/",
            WHOIS_TEMPLATE,
            timeout=1.0,
            max_bytes=10_000,
            transport=transport,
        )


def test_load_sources_wraps_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(UpstreamFetchError) as exc_info:
        load_sources(
            "https://example.com/",
            WHOIS_TEMPLATE,
            timeout=1.0,
            max_bytes=10_000,
            transport=httpx.MockTransport(handler),
        )

    assert exc_info.value.reason == "timed out"
    assert exc_info.value.errors == {
        "backend": [
            {"code": "BOOKMARKS_FETCH_FAILED", "description": "Can't generate preview"}
        ]
    }
