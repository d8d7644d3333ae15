import httpx

from bun_docs_mcp.core.content_negotiation import main_content_type, summarize_headers, truncate_utf8


def test_main_content_type_strips_parameters():
    headers = httpx.Headers({"content-type": "application/json; charset=utf-8"})
    assert main_content_type(headers) == "application/json"


def test_main_content_type_lowercases():
    assert main_content_type({"Content-Type": "TEXT/EVENT-STREAM"}) == "text/event-stream"


def test_main_content_type_trims_whitespace():
    assert main_content_type({"content-type": "  text/event-stream ;charset=utf-8"}) == "text/event-stream"


def test_main_content_type_missing_header():
    assert main_content_type(httpx.Headers()) == ""


def test_main_content_type_non_text_value():
    headers = httpx.Headers([(b"content-type", b"application/\xffjson")])
    assert main_content_type(headers) == ""


def test_summarize_headers_limits_to_eight():
    headers = httpx.Headers([(f"x-header-{i}", str(i)) for i in range(12)])
    summary = summarize_headers(headers)
    assert summary.startswith("x-header-0: 0, x-header-1: 1")
    assert summary.count(": ") == 8
    assert "x-header-8" not in summary


def test_summarize_headers_binary_value():
    headers = httpx.Headers([(b"x-raw", b"\xfe\xff"), (b"server", b"mock")])
    assert summarize_headers(headers) == "x-raw: <binary>, server: mock"


def test_truncate_utf8_short_text_untouched():
    assert truncate_utf8("hello", 2048) == "hello"


def test_truncate_utf8_never_splits_characters():
    text = "€" * 1000  # 3 bytes each
    truncated = truncate_utf8(text, 2048)
    assert len(truncated.encode("utf-8")) <= 2048
    assert truncated == "€" * 682


def test_truncate_utf8_boundary_inside_character():
    assert truncate_utf8("abé", 3) == "ab"
