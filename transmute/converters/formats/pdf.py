"""
PDF conversion.

PDFs are opened with PyMuPDF. Every conversion produces a ZIP archive: one
image per page for raster targets, a single member for text targets.
"""

import html
import zipfile
from io import BytesIO
from typing import Iterable, List, Tuple

import fitz
from PIL import Image

from ...config import FileType
from ...utils.error_handling import ConversionFailed
from ..base_converter import FormatConverter
from .image import encode_image

RASTER_TARGETS = ("png", "jpeg")


def build_archive(members: Iterable[Tuple[str, bytes]]) -> bytes:
    """Pack (name, content) pairs into a deflated ZIP archive."""
    output = BytesIO()
    with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in members:
            archive.writestr(name, data)
    return output.getvalue()


class PdfConverter(FormatConverter):
    """Converter for PDF documents."""

    file_type = FileType.APPLICATION

    def _convert(self, target_subtype: str, content: bytes) -> bytes:
        with fitz.open(stream=content, filetype="pdf") as document:
            if document.needs_pass:
                raise ConversionFailed("PDF is password protected", {"subtype": self.subtype})
            if document.page_count == 0:
                raise ConversionFailed("PDF has no pages", {"subtype": self.subtype})

            if target_subtype in RASTER_TARGETS:
                members = self._render_pages(document, target_subtype)
            elif target_subtype == "txt":
                members = [(f"{self.stem}.txt", self._extract_text(document))]
            else:
                members = [(f"{self.stem}.html", self._extract_html(document))]

        return build_archive(members)

    def _render_pages(self, document: fitz.Document, target_subtype: str) -> List[Tuple[str, bytes]]:
        members = []
        for number, page in enumerate(document, start=1):
            pixmap = page.get_pixmap(dpi=self.settings.pdf_render_dpi, alpha=False)
            image = Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)
            members.append((f"{self.stem}-{number}.{target_subtype}", encode_image(image, target_subtype)))
        return members

    def _extract_text(self, document: fitz.Document) -> bytes:
        return "\n".join(page.get_text() for page in document).encode("utf-8")

    def _extract_html(self, document: fitz.Document) -> bytes:
        pages = "\n".join(page.get_text("html") for page in document)
        return (
            "<!DOCTYPE html>\n"
            f"<html><head><meta charset=\"utf-8\"><title>{html.escape(self.stem)}</title></head>\n"
            f"<body>\n{pages}\n</body></html>\n"
        ).encode("utf-8")
