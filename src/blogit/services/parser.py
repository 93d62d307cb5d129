"""Front-matter parsing: split a raw document, decode its metadata, render its body."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import markdown
import structlog
import yaml

from blogit.errors import MalformedDocumentError, MissingMetadataError

logger = structlog.get_logger(__name__)

SECTION_SPLITTER = re.compile(r"\s+^-{3,}[ \t\r]*$\s+", flags=re.MULTILINE)
MARKDOWN_EXTENSIONS = ("fenced_code", "tables")

MetadataDecoder = Callable[[str], Any]
BodyRenderer = Callable[[str], str]


def _render_markdown(text: str) -> str:
    return markdown.markdown(text, extensions=list(MARKDOWN_EXTENSIONS))


@dataclass(slots=True, frozen=True)
class Sections:
    metadata: str
    body: str


@dataclass(slots=True, frozen=True)
class ParsedDocument:
    metadata: dict[str, Any]
    body: str
    html: str


class DocumentParser:
    """Splits ``metadata --- body`` documents.

    The YAML decoder and the Markdown renderer are injectable so callers can
    swap them without touching the splitting rules.
    """

    def __init__(
        self,
        decoder: MetadataDecoder | None = None,
        renderer: BodyRenderer | None = None,
    ) -> None:
        self._decode = decoder or yaml.safe_load
        self._render = renderer or _render_markdown

    def split_sections(self, raw: str) -> Sections:
        sections = SECTION_SPLITTER.split(raw)
        if len(sections) != 2:
            raise MalformedDocumentError(
                f"Expected a metadata block and a body separated by '---', found {len(sections)} section(s)."
            )
        metadata, body = sections
        return Sections(metadata=metadata.strip(), body=body.strip())

    def decode_metadata(self, text: str) -> dict[str, Any]:
        try:
            decoded = self._decode(text)
        except yaml.YAMLError as exc:
            raise MalformedDocumentError(f"Front-matter could not be decoded: {exc}") from exc
        if not decoded:
            raise MissingMetadataError("Document metadata not found.")
        if not isinstance(decoded, Mapping):
            raise MissingMetadataError(
                f"Document metadata must be a mapping, got {type(decoded).__name__}."
            )
        return dict(decoded)

    def render_body(self, text: str) -> str:
        return self._render(text)

    def get_body(self, raw: str) -> str:
        return self.split_sections(raw).body

    def get_metadata(self, raw: str) -> dict[str, Any]:
        return self.decode_metadata(self.split_sections(raw).metadata)

    def parse(self, raw: str) -> ParsedDocument:
        """Split, decode and render ``raw`` in a single pass."""
        sections = self.split_sections(raw)
        metadata = self.decode_metadata(sections.metadata)
        html = self.render_body(sections.body)
        logger.debug("parser.parsed", keys=list(metadata), body_length=len(sections.body))
        return ParsedDocument(metadata=metadata, body=sections.body, html=html)
