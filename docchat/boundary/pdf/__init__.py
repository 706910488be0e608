"""PDF text extraction."""

from docchat.boundary.pdf.pdf_loader import PdfLoader

__all__ = ["PdfLoader"]
