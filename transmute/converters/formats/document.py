"""
Document conversion.

- DOCX is read with mammoth (HTML or raw text)
- HTML is cleaned and flattened to text with BeautifulSoup
- DOCX output is written by html4docx
- External images, stylesheets and frames are dropped before rendering;
  only inline ``data:`` resources reach html4docx and WeasyPrint
- PDF output is rendered by WeasyPrint
"""

import html
from io import BytesIO

import mammoth
from bs4 import BeautifulSoup
from html4docx import HtmlToDocx

from ...config import FileType
from ..base_converter import FormatConverter


def html_document(body: str, title: str = "") -> str:
    """Wrap an HTML fragment in a complete UTF-8 document."""
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{html.escape(title)}</title></head>\n"
        f"<body>\n{body}\n</body></html>\n"
    )


NON_CONTENT_TAGS = ["head", "script", "style", "noscript"]

# Tag -> attributes whose URL a renderer would load
RESOURCE_ATTRIBUTES = {
    "img": ("src", "srcset"),
    "link": ("href",),
    "source": ("src", "srcset"),
    "video": ("src", "poster"),
    "audio": ("src",),
    "iframe": ("src",),
    "embed": ("src",),
    "object": ("data",),
    "image": ("href", "xlink:href"),
}

INLINE_URL_SCHEME = "data:"


class ExternalResourceBlocked(ValueError):
    """Raised by the PDF renderer's URL fetcher for anything but inline data."""
    pass


def is_inline_url(url: str) -> bool:
    return url.strip().lower().startswith(INLINE_URL_SCHEME)


def drop_external_resources(soup: BeautifulSoup) -> BeautifulSoup:
    """Remove every element that references a file or URL instead of inline data."""
    for element in soup(list(RESOURCE_ATTRIBUTES)):
        # nested inside an element removed earlier in this pass
        if element.decomposed:
            continue
        urls = [element.get(attribute) for attribute in RESOURCE_ATTRIBUTES[element.name]]
        if any(url and not is_inline_url(url) for url in urls):
            element.decompose()
    return soup


def inline_only_url_fetcher(url: str, *args, **kwargs):
    """WeasyPrint URL fetcher that only resolves ``data:`` URLs."""
    if not is_inline_url(url):
        raise ExternalResourceBlocked(f"External resource blocked: {url}")

    from weasyprint import default_url_fetcher

    return default_url_fetcher(url, *args, **kwargs)


def _content_soup(html_content: str) -> BeautifulSoup:
    soup = BeautifulSoup(html_content, "html.parser")
    for element in soup(NON_CONTENT_TAGS):
        element.decompose()
    return soup


def html_to_text(html_content: str) -> str:
    """Extract readable text from HTML, dropping the head, scripts and styles."""
    return _content_soup(html_content).get_text("\n", strip=True)


def html_to_pdf(html_content: str) -> bytes:
    # WeasyPrint loads Pango through cffi at import time
    from weasyprint import HTML

    soup = drop_external_resources(BeautifulSoup(html_content, "html.parser"))
    return HTML(string=str(soup), url_fetcher=inline_only_url_fetcher).write_pdf()


def html_to_docx(html_content: str) -> bytes:
    soup = drop_external_resources(_content_soup(html_content))
    body = soup.body.decode_contents() if soup.body else str(soup)
    docx_document = HtmlToDocx().parse_html_string(body)
    output = BytesIO()
    docx_document.save(output)
    return output.getvalue()


def text_to_html(text: str, title: str = "") -> str:
    """Render plain text as an HTML document, one paragraph per line."""
    paragraphs = "\n".join(f"<p>{html.escape(line)}</p>" for line in text.splitlines())
    return html_document(paragraphs, title)


class DocumentConverter(FormatConverter):
    """Converter for word-processing and text documents."""

    file_type = FileType.DOCUMENT

    def _convert(self, target_subtype: str, content: bytes) -> bytes:
        if self.subtype == "docx" and target_subtype == "txt":
            return mammoth.extract_raw_text(BytesIO(content)).value.encode("utf-8")

        html_content = self._read_html(content)

        if target_subtype == "html":
            return html_content.encode("utf-8")
        if target_subtype == "txt":
            return html_to_text(html_content).encode("utf-8")
        if target_subtype == "docx":
            return html_to_docx(html_content)
        return html_to_pdf(html_content)

    def _read_html(self, content: bytes) -> str:
        if self.subtype == "docx":
            result = mammoth.convert_to_html(BytesIO(content))
            return html_document(result.value, self.stem)

        text = content.decode("utf-8", errors="replace")
        if self.subtype == "txt":
            return text_to_html(text, self.stem)
        return text
