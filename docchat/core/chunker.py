"""
Text chunking using RecursiveCharacterTextSplitter.

Splits extracted document text into overlapping windows. The splitter is
used only to choose boundaries (paragraph break, line break, space,
character); the overlap is then applied from the original text so that
every chunk after the first repeats exactly the trailing `chunk_overlap`
characters of its predecessor.

Dependencies: langchain_text_splitters
System role: First stage of the ingest pipeline (pure, no I/O)
"""

import bisect
from collections.abc import Sequence

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docchat.core.exceptions import ConfigurationError
from docchat.models.chunk import Chunk

SEPARATORS = ["\n\n", "\n", " ", ""]
PAGE_SEPARATOR = "\n\n"


def validate_chunk_parameters(chunk_size: int, chunk_overlap: int) -> None:
    """Raise ConfigurationError for parameters the chunker cannot honor."""
    if chunk_size <= 0:
        raise ConfigurationError(
            "chunk_size must be positive",
            details={"chunk_size": chunk_size},
        )
    if chunk_overlap < 0:
        raise ConfigurationError(
            "chunk_overlap must not be negative",
            details={"chunk_overlap": chunk_overlap},
        )
    if chunk_overlap >= chunk_size:
        raise ConfigurationError(
            "chunk_overlap must be smaller than chunk_size",
            details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
        )


class Chunker:
    """Split text into overlapping chunks with page and offset metadata."""

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        """
        Initialize chunker with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters, overlap included
            chunk_overlap: Characters repeated from the previous chunk

        Raises:
            ConfigurationError: When chunk_overlap >= chunk_size or either is out of range
        """
        validate_chunk_parameters(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        # Boundaries only: pieces partition the text exactly, overlap is added afterwards.
        self._splitter = RecursiveCharacterTextSplitter(
            separators=SEPARATORS,
            chunk_size=chunk_size - chunk_overlap,
            chunk_overlap=0,
            keep_separator="start",
            strip_whitespace=False,
            length_function=len,
        )

    def chunk(self, text: str, document_id: str = "") -> list[Chunk]:
        """
        Split a single text, treated as page 1.

        Args:
            text: Extracted document text
            document_id: Id stamped on every chunk

        Returns:
            list[Chunk]: Chunks in document order
        """
        return self._chunk(text, document_id, page_starts=[0])

    def chunk_pages(self, pages: Sequence[str], document_id: str = "") -> list[Chunk]:
        """
        Split page texts joined by a paragraph break.

        Each chunk carries the 1-based page number of its first character.

        Args:
            pages: Page texts in page order
            document_id: Id stamped on every chunk

        Returns:
            list[Chunk]: Chunks in document order
        """
        page_starts: list[int] = []
        offset = 0
        for page in pages:
            page_starts.append(offset)
            offset += len(page) + len(PAGE_SEPARATOR)
        text = PAGE_SEPARATOR.join(pages)
        return self._chunk(text, document_id, page_starts=page_starts or [0])

    def _chunk(self, text: str, document_id: str, page_starts: list[int]) -> list[Chunk]:
        if len(text) <= self.chunk_size:
            return [
                Chunk(
                    source_document_id=document_id,
                    index=0,
                    text=text,
                    page_number=1,
                    char_offset=0,
                )
            ]

        chunks: list[Chunk] = []
        start = 0
        for index, piece in enumerate(self._splitter.split_text(text)):
            end = start + len(piece)
            window_start = max(0, start - self.chunk_overlap)
            chunks.append(
                Chunk(
                    source_document_id=document_id,
                    index=index,
                    text=text[window_start:end],
                    page_number=bisect.bisect_right(page_starts, window_start),
                    char_offset=window_start,
                )
            )
            start = end
        return chunks


def chunk(text: str, chunk_size: int = 1000, overlap: int = 200) -> list[Chunk]:
    """Split text with a one-off Chunker."""
    return Chunker(chunk_size=chunk_size, chunk_overlap=overlap).chunk(text)


def merge_chunks(chunks: Sequence[Chunk]) -> str:
    """Rebuild the source text from chunks by dropping the overlapping prefixes."""
    merged = ""
    for item in sorted(chunks, key=lambda c: c.index):
        merged += item.text[len(merged) - item.char_offset:]
    return merged
