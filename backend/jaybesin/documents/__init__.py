"""
Billing documents
- builder: Document / LineItem construction from shipments and containers
- pdf_renderer: paginated PDF output (reportlab)
"""

from jaybesin.documents.builder import (
    Currency, DocType, Document, DocumentGenerationError, LineItem,
    build_document, build_manual_document, convert, format_money, to_usd,
)
from jaybesin.documents.pdf_renderer import RenderedDocument, export, render

__all__ = [
    "Currency",
    "DocType",
    "Document",
    "DocumentGenerationError",
    "LineItem",
    "build_document",
    "build_manual_document",
    "convert",
    "format_money",
    "to_usd",
    "RenderedDocument",
    "export",
    "render",
]
