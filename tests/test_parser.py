import pytest

from blogit.errors import MalformedDocumentError, MissingMetadataError
from blogit.services.parser import DocumentParser


def test_split_sections_separates_metadata_and_body(parser: DocumentParser) -> None:
    sections = parser.split_sections("title: Hello World\n\n-----\n\n  # Heading\n\nText\n")
    assert sections.metadata == "title: Hello World"
    assert sections.body == "# Heading\n\nText"


def test_metadata_round_trip(parser: DocumentParser) -> None:
    raw = 'title: "Hello World"\ntags: [a, b]\n---\nBody'
    metadata = parser.decode_metadata(parser.split_sections(raw).metadata)
    assert metadata["title"] == "Hello World"
    assert metadata["tags"] == ["a", "b"]


def test_missing_separator_is_malformed(parser: DocumentParser) -> None:
    with pytest.raises(MalformedDocumentError):
        parser.split_sections("title: Hello\nNo separator here")


def test_second_separator_is_malformed(parser: DocumentParser) -> None:
    with pytest.raises(MalformedDocumentError):
        parser.split_sections("title: Hello\n---\nIntro\n---\nMore")


def test_inline_dashes_do_not_split(parser: DocumentParser) -> None:
    sections = parser.split_sections("title: Dashes\n---\nA --- B and |---|---|")
    assert sections.body == "A --- B and |---|---|"


def test_empty_metadata_is_missing(parser: DocumentParser) -> None:
    with pytest.raises(MissingMetadataError):
        parser.get_metadata("# just a comment\n---\nBody")


def test_scalar_metadata_is_missing(parser: DocumentParser) -> None:
    with pytest.raises(MissingMetadataError):
        parser.decode_metadata("just a sentence")


def test_invalid_yaml_is_malformed(parser: DocumentParser) -> None:
    with pytest.raises(MalformedDocumentError):
        parser.decode_metadata("title: [unclosed")


def test_get_body_is_trimmed(parser: DocumentParser) -> None:
    assert parser.get_body("title: x\n---\n\n\n  Body  \n\n") == "Body"


def test_render_body_uses_markdown(parser: DocumentParser) -> None:
    html = parser.render_body("Some **bold** text")
    assert "<strong>bold</strong>" in html


def test_injected_collaborators_are_used() -> None:
    parser = DocumentParser(decoder=lambda text: {"title": text.upper()}, renderer=lambda text: f"<p>{text}</p>")
    parsed = parser.parse("hello\n---\nworld")
    assert parsed.metadata == {"title": "HELLO"}
    assert parsed.body == "world"
    assert parsed.html == "<p>world</p>"


def test_windows_line_endings(parser: DocumentParser) -> None:
    sections = parser.split_sections("title: CRLF\r\n---\r\nBody\r\n")
    assert parser.decode_metadata(sections.metadata) == {"title": "CRLF"}
    assert sections.body == "Body"
