"""Tests for fixed-size overlapping chunking."""

import pytest

from ragpipe.core.config import settings
from ragpipe.core.exceptions import ConfigurationError
from ragpipe.services.chunking import ChunkingService


def _reassemble(chunks, overlap):
    text = chunks[0].text
    for chunk in chunks[1:]:
        text += chunk.text[overlap:]
    return text


def test_default_sizes_split_1200_chars_into_three_chunks():
    text = "".join(chr(ord("a") + i % 26) for i in range(1200))
    chunks = ChunkingService(chunk_size=500, chunk_overlap=50).chunk_text(text, "doc-1")

    assert len(chunks) == 3
    assert [c.metadata["start_index"] for c in chunks] == [0, 450, 900]
    assert [c.metadata["end_index"] for c in chunks] == [500, 950, 1200]
    assert [len(c.text) for c in chunks] == [500, 500, 300]
    assert [c.chunk_index for c in chunks] == [0, 1, 2]


@pytest.mark.parametrize("text", ["", "   ", "\n\t \n"])
def test_blank_text_yields_no_chunks(text):
    assert ChunkingService(500, 50).chunk_text(text, "doc-1") == []


@pytest.mark.parametrize("size,overlap", [(50, 50), (50, 80), (0, 0), (10, -1)])
def test_invalid_window_is_rejected_at_construction(size, overlap):
    with pytest.raises(ConfigurationError):
        ChunkingService(chunk_size=size, chunk_overlap=overlap)


@pytest.mark.parametrize("length", [1, 99, 100, 101, 181, 500, 1234])
def test_chunks_reassemble_to_original_text(chunker, length):
    text = "".join(chr(ord("A") + i % 23) for i in range(length))
    chunks = chunker.chunk_text(text, "doc-1")

    assert _reassemble(chunks, chunker.chunk_overlap) == text
    assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
    assert all(len(c.text) <= chunker.chunk_size for c in chunks)


def test_chunks_carry_document_and_page(chunker):
    chunks = chunker.chunk_text("x" * 150, "doc-9", page_number=4)

    assert {c.document_id for c in chunks} == {"doc-9"}
    assert {c.page_number for c in chunks} == {4}
    assert all(c.embedding is None for c in chunks)
    assert len({c.id for c in chunks}) == len(chunks)


def test_offsets_match_chunk_text(chunker):
    text = "The quick brown fox jumps over the lazy dog. " * 10
    for chunk in chunker.chunk_text(text, "doc-1"):
        start, end = chunk.metadata["start_index"], chunk.metadata["end_index"]
        assert text[start:end] == chunk.text


def test_defaults_come_from_settings():
    service = ChunkingService()
    assert service.chunk_size == settings.chunk_size
    assert service.chunk_overlap == settings.chunk_overlap
