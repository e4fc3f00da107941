"""Tests for PDF page extraction."""

import io

import pytest
from pypdf import PdfWriter

from ragpipe.core.exceptions import ExtractionError
from ragpipe.services.extraction import PdfExtractor


def _blank_pdf(pages: int) -> io.BytesIO:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    buffer.seek(0)
    return buffer


async def test_pages_are_numbered_from_one():
    pages = await PdfExtractor().extract_pages(_blank_pdf(3))

    assert [p.page_number for p in pages] == [1, 2, 3]
    assert all(p.text.strip() == "" for p in pages)


async def test_unreadable_stream_raises_extraction_error():
    with pytest.raises(ExtractionError):
        await PdfExtractor().extract_pages(io.BytesIO(b"this is not a pdf"))
