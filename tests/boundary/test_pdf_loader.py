"""
Test suite for PdfLoader.

PyPDFLoader is patched so no real PDF parsing happens.

System role: Verification of PDF text extraction errors and page order
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from langchain_core.documents import Document

from docchat.boundary.pdf.pdf_loader import PdfLoader
from docchat.core.exceptions import ParsingError

LOADER_PATH = "docchat.boundary.pdf.pdf_loader.PyPDFLoader"


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4 placeholder")
    return path


def test_pages_should_be_returned_in_order(pdf_file: Path) -> None:
    documents = [Document(page_content="page one"), Document(page_content="page two")]
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.return_value = documents

        pages = PdfLoader().load_pages(pdf_file)

    assert pages == ["page one", "page two"]
    loader_cls.assert_called_once_with(str(pdf_file))


def test_missing_file_should_raise(tmp_path: Path) -> None:
    with pytest.raises(ParsingError, match="File not found"):
        PdfLoader().load_pages(tmp_path / "absent.pdf")


def test_non_pdf_should_raise(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    with pytest.raises(ParsingError, match="Unsupported file format"):
        PdfLoader().load_pages(path)


def test_unreadable_pdf_should_raise(pdf_file: Path) -> None:
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.side_effect = ValueError("EOF marker not found")

        with pytest.raises(ParsingError) as exc_info:
            PdfLoader().load_pages(pdf_file)

    assert exc_info.value.file_path == str(pdf_file)


def test_pdf_without_text_should_raise(pdf_file: Path) -> None:
    with patch(LOADER_PATH) as loader_cls:
        loader_cls.return_value.load.return_value = [Document(page_content="  \n ")]

        with pytest.raises(ParsingError, match="no extractable text"):
            PdfLoader().load_pages(pdf_file)


@pytest.mark.asyncio
async def test_async_loading_should_match_sync(pdf_file: Path) -> None:
    loader = PdfLoader()
    loader.load_pages = MagicMock(return_value=["text"])

    assert await loader.aload_pages(pdf_file) == ["text"]
    loader.load_pages.assert_called_once_with(pdf_file)
