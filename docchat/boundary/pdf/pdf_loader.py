"""
PDF text extraction with LangChain PyPDFLoader.

Loads one LangChain Document per page and returns the page texts in order.
Loading is blocking, so async callers run it in the threadpool.

Dependencies: langchain_community.document_loaders, pypdf
System role: Raw text source for the ingest path
"""

import logging
from pathlib import Path

from fastapi.concurrency import run_in_threadpool
from langchain_community.document_loaders import PyPDFLoader

from docchat.core.exceptions import ParsingError

logger = logging.getLogger(__name__)


class PdfLoader:
    """Extract page texts from PDF files."""

    def load_pages(self, file_path: str | Path) -> list[str]:
        """
        Extract text page by page.

        Args:
            file_path: Path to a .pdf file

        Returns:
            list[str]: One string per page, in page order

        Raises:
            ParsingError: Missing file, non-PDF path, unreadable PDF, or no extractable text
        """
        path = Path(file_path)
        if not path.exists():
            raise ParsingError(f"File not found: {file_path}", str(file_path))

        if path.suffix.lower() != ".pdf":
            raise ParsingError(
                f"Unsupported file format: {path.suffix}. Only PDF files are supported.",
                str(file_path),
            )

        try:
            documents = PyPDFLoader(str(path)).load()
        except Exception as e:
            logger.error(f"{__name__}:load_pages - {type(e).__name__}: {e}")
            raise ParsingError(f"Failed to parse PDF: {e}", str(file_path)) from e

        pages = [doc.page_content or "" for doc in documents]
        if not any(page.strip() for page in pages):
            raise ParsingError("PDF document contains no extractable text", str(file_path))

        logger.info(
            f"{__name__}:load_pages - Extracted text",
            extra={"file": path.name, "pages": len(pages)},
        )
        return pages

    async def aload_pages(self, file_path: str | Path) -> list[str]:
        """Async variant of load_pages."""
        return await run_in_threadpool(self.load_pages, file_path)
