# utils/pdf_utils.py
"""Helpers shared by the document renderers and the page preview."""

import base64
import binascii
import urllib.parse
from typing import List, Tuple

import fitz  # PyMuPDF
from PyQt6.QtGui import QImage


def decode_image_payload(payload: str) -> bytes:
    """Decode an image answer into raw image bytes.

    Image answers are stored as data URLs (``data:image/png;base64,...``);
    bare base64 strings are accepted as well.

    Raises:
        ValueError: The payload is not valid base64.
    """
    if payload.startswith("data:"):
        header, _, payload = payload.partition(",")
        if ";base64" not in header:
            return urllib.parse.unquote_to_bytes(payload)
    try:
        return base64.b64decode("".join(payload.split()), validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid image data: {e}") from e


def image_size(data: bytes) -> Tuple[int, int]:
    """Return the pixel size of encoded image bytes."""
    pix = fitz.Pixmap(data)
    return pix.width, pix.height


class PDFUtils:
    """Rasterization helpers for showing rendered PDF pages in Qt widgets."""

    @staticmethod
    def render_page(page: fitz.Page, scale: float = 2.0) -> QImage:
        """Render one PDF page to a QImage.

        Args:
            page (fitz.Page): The PyMuPDF page to render.
            scale (float): Zoom factor; larger values give sharper images.

        Returns:
            QImage: A copy of the rendered page that owns its pixel data.
        """
        matrix = fitz.Matrix(scale, scale)
        pix = page.get_pixmap(matrix=matrix)

        if pix.alpha:
            image_format = QImage.Format.Format_RGBA8888
        else:
            image_format = QImage.Format.Format_RGB888

        qimage = QImage(pix.samples, pix.width, pix.height, pix.stride, image_format)

        # pix.samples is released with pix, so hand out a deep copy
        return qimage.copy()

    @staticmethod
    def render_document(pdf_bytes: bytes, scale: float = 1.0) -> List[QImage]:
        """Render every page of an in-memory PDF to QImages."""
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        try:
            return [PDFUtils.render_page(page, scale) for page in doc]
        finally:
            doc.close()
