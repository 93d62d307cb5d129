from datetime import date, datetime, timezone

import pytest

from conftest import encode
from blogit.utils import coerce_timestamp, decode_base64_text, slugify


def test_slugify_basic() -> None:
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  Custom   Slug ") == "custom-slug"
    assert slugify("Café & Crème") == "cafe-creme"


def test_slugify_truncates_without_trailing_hyphen() -> None:
    assert slugify("abc def", max_length=4) == "abc"


def test_decode_base64_ignores_wrapping() -> None:
    text = "title: long\n---\n" + "x" * 200
    assert decode_base64_text(encode(text)) == text
    assert decode_base64_text("") == ""
    with pytest.raises(ValueError):
        decode_base64_text("not base64!")


def test_coerce_timestamp_variants() -> None:
    utc = timezone.utc
    assert coerce_timestamp(date(2024, 5, 1)) == datetime(2024, 5, 1, tzinfo=utc)
    assert coerce_timestamp(datetime(2024, 5, 1, 8, 30)) == datetime(2024, 5, 1, 8, 30, tzinfo=utc)
    assert coerce_timestamp("2024-05-01T08:30:00+02:00") == datetime(2024, 5, 1, 6, 30, tzinfo=utc)
    with pytest.raises(ValueError):
        coerce_timestamp(42)
