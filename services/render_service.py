# services/render_service.py
import io
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

import fitz  # PyMuPDF
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Mm, Pt, RGBColor

from models.page_models import BlockKind, Page, PageBlock, PageGeometry
from utils.constants import WORD_EXTENSION
from utils.errors import RenderUnavailable
from utils.pdf_utils import decode_image_payload, image_size

logger = logging.getLogger(__name__)

IMAGE_ERROR_TEXT = "[Image could not be rendered]"

BLACK = (0, 0, 0)
GRAY = (0.4, 0.4, 0.4)
LIGHT_GRAY = (0.6, 0.6, 0.6)
RED = (0.73, 0.11, 0.11)
BLUE = (0.11, 0.31, 0.85)

# block kind -> (font size, base-14 font name, colour)
PDF_STYLES: Dict[BlockKind, Tuple[float, str, Tuple[float, float, float]]] = {
    BlockKind.HEADING: (20, "hebo", BLACK),
    BlockKind.POINTS: (12, "helv", GRAY),
    BlockKind.STATEMENT: (13, "tiro", BLACK),
    BlockKind.TEXT: (12, "tiro", BLACK),
    BlockKind.LABEL: (10, "hebo", GRAY),
    BlockKind.PLACEHOLDER: (11, "heit", LIGHT_GRAY),
    BlockKind.FIELD: (16, "hebo", BLACK),
    BlockKind.START_MARKER: (10, "hebo", RED),
    BlockKind.END_MARKER: (10, "hebo", BLUE),
    BlockKind.FOOTER: (9, "cour", LIGHT_GRAY),
}

MIN_FONT_SIZE = 6.0
FONT_STEP = 0.9
MIN_BLOCK_HEIGHT = 24.0
TRUNCATED_SUFFIX = " [...]"
BLOCK_GAP = 10.0
HEADER_HEIGHT = 56.0
MARKER_HEIGHT = 28.0


class DocumentRenderer(ABC):
    """Turns a page sequence into a document file, one sheet per Page."""

    extension: str = ""

    @abstractmethod
    def render(self, pages: List[Page], geometry: PageGeometry, file_path: str) -> None:
        """Write ``pages`` to ``file_path``.

        Raises:
            RenderUnavailable: The document could not be produced or written.
        """


class PdfRenderer(DocumentRenderer):
    """Renders pages to PDF with PyMuPDF."""

    extension = ".pdf"

    def render(self, pages: List[Page], geometry: PageGeometry, file_path: str) -> None:
        data = self.render_to_bytes(pages, geometry)
        try:
            with open(file_path, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise RenderUnavailable(f"Could not write {file_path}: {e}") from e
        logger.info("Wrote %d-page PDF to %s", len(pages), file_path)

    def render_to_bytes(self, pages: List[Page], geometry: PageGeometry) -> bytes:
        """Render ``pages`` to an in-memory PDF.

        Raises:
            RenderUnavailable: PyMuPDF failed to build the document.
        """
        doc = fitz.open()
        try:
            for page in pages:
                pdf_page = doc.new_page(width=geometry.width_pt, height=geometry.height_pt)
                self._draw_page(pdf_page, page, geometry)
            return doc.tobytes()
        except RenderUnavailable:
            raise
        except Exception as e:
            logger.exception("PDF rendering failed")
            raise RenderUnavailable(str(e)) from e
        finally:
            doc.close()

    # --- layout ---

    @staticmethod
    def _truncated(words: List[str], count: int) -> str:
        return " ".join(words[:count]) + TRUNCATED_SUFFIX

    def _fit_textbox(self, pdf_page: fitz.Page, rect: fitz.Rect, text: str, fontsize: float,
                     fontname: str, color: Tuple[float, float, float],
                     align: int = fitz.TEXT_ALIGN_LEFT) -> float:
        """
        Write ``text`` into ``rect``, shrinking the font until it fits.

        ``insert_textbox`` writes nothing when the text overflows its rect, so
        every attempt is checked. Text that does not fit even at
        ``MIN_FONT_SIZE`` is cut at a word boundary and marked as truncated.

        Returns:
            float: Height used from the top of ``rect``.
        """
        if rect.height <= 0 or rect.width <= 0 or not text:
            return 0.0
        size = fontsize
        while True:
            unused = pdf_page.insert_textbox(rect, text, fontsize=size, fontname=fontname,
                                             color=color, align=align)
            if unused >= 0:
                if size < fontsize:
                    logger.debug("Shrunk text block from %.1fpt to %.1fpt to fit", fontsize, size)
                return rect.height - unused
            if size <= MIN_FONT_SIZE:
                break
            size = max(MIN_FONT_SIZE, size * FONT_STEP)

        # Largest word prefix that fits, measured on a throwaway page.
        words = text.split(" ")
        scratch = fitz.open()
        try:
            scratch_page = scratch.new_page(width=pdf_page.rect.width, height=pdf_page.rect.height)
            low, high = 0, len(words)
            while low < high:
                mid = (low + high + 1) // 2
                if scratch_page.insert_textbox(rect, self._truncated(words, mid), fontsize=size,
                                               fontname=fontname, align=align) >= 0:
                    low = mid
                else:
                    high = mid - 1
        finally:
            scratch.close()

        if low == 0:
            logger.warning("No room left for a %d-character text block", len(text))
            return 0.0
        logger.warning("Text block truncated to %d of %d words", low, len(words))
        unused = pdf_page.insert_textbox(rect, self._truncated(words, low), fontsize=size,
                                         fontname=fontname, color=color, align=align)
        return rect.height - max(unused, 0)

    def _draw_text(self, pdf_page: fitz.Page, y: float, text: str, kind: BlockKind,
                   x0: float, x1: float, bottom: float, align: int = fitz.TEXT_ALIGN_LEFT) -> float:
        fontsize, fontname, color = PDF_STYLES[kind]
        used = self._fit_textbox(pdf_page, fitz.Rect(x0, y, x1, bottom), text, fontsize, fontname,
                                 color, align)
        return y + used + BLOCK_GAP

    @staticmethod
    def _reserved_height(blocks: List[PageBlock]) -> float:
        """Minimum room the given blocks need below the one being drawn."""
        height = 0.0
        for block in blocks:
            if block.kind is BlockKind.START_MARKER:
                height += MARKER_HEIGHT + BLOCK_GAP
            elif block.kind is not BlockKind.END_MARKER:
                height += MIN_BLOCK_HEIGHT + BLOCK_GAP
        return height

    def _draw_header(self, pdf_page: fitz.Page, page: Page, x0: float, x1: float, y: float) -> float:
        half = (x0 + x1) / 2
        pdf_page.insert_textbox(fitz.Rect(x0, y, half, y + 20), f"ID: {page.student_id}",
                                fontsize=14, fontname="hebo", color=BLACK)
        pdf_page.insert_textbox(fitz.Rect(x0, y + 22, half, y + 40), page.student_name,
                                fontsize=11, fontname="helv", color=GRAY)
        pdf_page.insert_textbox(fitz.Rect(half, y, x1, y + 20), page.header_title,
                                fontsize=13, fontname="hebo", color=BLACK, align=fitz.TEXT_ALIGN_RIGHT)
        pdf_page.insert_textbox(fitz.Rect(half, y + 22, x1, y + 40), page.header_subtitle,
                                fontsize=10, fontname="helv", color=GRAY, align=fitz.TEXT_ALIGN_RIGHT)
        line_y = y + HEADER_HEIGHT - 10
        pdf_page.draw_line(fitz.Point(x0, line_y), fitz.Point(x1, line_y), color=BLACK, width=3)
        return y + HEADER_HEIGHT + BLOCK_GAP

    def _draw_image(self, pdf_page: fitz.Page, block: PageBlock, x0: float, x1: float,
                    y: float, bottom: float) -> float:
        if bottom - y < 20:
            return y
        rect = fitz.Rect(x0, y, x1, bottom)
        try:
            data = decode_image_payload(block.image or "")
            pdf_page.insert_image(rect, stream=data, keep_proportion=True)
        except Exception as e:
            logger.warning("Skipping unreadable image: %s", e)
            return self._draw_text(pdf_page, y, IMAGE_ERROR_TEXT, BlockKind.PLACEHOLDER, x0, x1, bottom)
        return bottom + BLOCK_GAP

    def _draw_marker(self, pdf_page: fitz.Page, block: PageBlock, x0: float, x1: float, y: float) -> float:
        fontsize, fontname, color = PDF_STYLES[block.kind]
        if block.kind is BlockKind.START_MARKER:
            pdf_page.draw_line(fitz.Point(x0, y), fitz.Point(x1, y), color=color, width=1.5)
            pdf_page.insert_textbox(fitz.Rect(x0, y + 4, x1, y + MARKER_HEIGHT), block.text.upper(),
                                    fontsize=fontsize, fontname=fontname, color=color)
        else:
            pdf_page.insert_textbox(fitz.Rect(x0, y, x1, y + MARKER_HEIGHT - 6), block.text.upper(),
                                    fontsize=fontsize, fontname=fontname, color=color)
            line_y = y + MARKER_HEIGHT - 4
            pdf_page.draw_line(fitz.Point(x0, line_y), fitz.Point(x1, line_y), color=color, width=1.5)
        return y + MARKER_HEIGHT + BLOCK_GAP

    def _draw_page(self, pdf_page: fitz.Page, page: Page, geometry: PageGeometry) -> None:
        pad = geometry.padding_pt
        x0, x1 = pad, geometry.width_pt - pad
        bottom = geometry.height_pt - pad
        if page.has_header:
            self._draw_content_page(pdf_page, page, x0, x1, pad, bottom)
        else:
            self._draw_title_page(pdf_page, page, x0, x1, pad, bottom)

    def _draw_title_page(self, pdf_page: fitz.Page, page: Page, x0: float, x1: float,
                         top: float, bottom: float) -> None:
        y = top + (bottom - top) * 0.25
        center = fitz.TEXT_ALIGN_CENTER
        for block in page.blocks:
            if block.kind is BlockKind.FIELD:
                pdf_page.insert_textbox(fitz.Rect(x0 + 40, y, x0 + 200, y + 24), block.text.upper(),
                                        fontsize=12, fontname="hebo", color=GRAY)
                pdf_page.insert_textbox(fitz.Rect(x0 + 200, y - 3, x1 - 40, y + 24), block.value,
                                        fontsize=16, fontname="hebo", color=BLACK)
                y += 36
            elif block.kind is BlockKind.FOOTER:
                self._draw_text(pdf_page, bottom - 20, block.text, block.kind, x0, x1, bottom, align=center)
            elif block.kind is BlockKind.HEADING:
                _, fontname, color = PDF_STYLES[block.kind]
                height = self._fit_textbox(pdf_page, fitz.Rect(x0, y, x1, y + 120), block.text,
                                           32, fontname, color, align=center)
                y += height + BLOCK_GAP
            else:
                y = self._draw_text(pdf_page, y, block.text, BlockKind.HEADING, x0, x1, bottom, align=center)
                y += 20

    def _draw_content_page(self, pdf_page: fitz.Page, page: Page, x0: float, x1: float,
                           top: float, bottom: float) -> None:
        y = self._draw_header(pdf_page, page, x0, x1, top)
        content_bottom = bottom - MARKER_HEIGHT - BLOCK_GAP if page.has_end_marker else bottom
        for index, block in enumerate(page.blocks):
            # leave room for everything still to come, so a long statement
            # cannot push the answer off the sheet
            block_bottom = content_bottom - self._reserved_height(page.blocks[index + 1:])
            if block.kind is BlockKind.END_MARKER:
                # anchored to the bottom of the sheet
                self._draw_marker(pdf_page, block, x0, x1, bottom - MARKER_HEIGHT)
            elif block.kind is BlockKind.START_MARKER:
                y = self._draw_marker(pdf_page, block, x0, x1, y)
            elif block.kind is BlockKind.IMAGE:
                y = self._draw_image(pdf_page, block, x0, x1, y, block_bottom)
            elif y < block_bottom:
                y = self._draw_text(pdf_page, y, block.text, block.kind, x0, x1, block_bottom)


class DocxRenderer(DocumentRenderer):
    """Renders pages to a Word document with python-docx, one page break per Page."""

    extension = WORD_EXTENSION

    def render(self, pages: List[Page], geometry: PageGeometry, file_path: str) -> None:
        try:
            doc = self.build_document(pages, geometry)
            doc.save(file_path)
        except RenderUnavailable:
            raise
        except Exception as e:
            logger.exception("Word rendering failed")
            raise RenderUnavailable(str(e)) from e
        logger.info("Wrote %d-page Word document to %s", len(pages), file_path)

    def build_document(self, pages: List[Page], geometry: PageGeometry) -> Document:
        doc = Document()
        section = doc.sections[0]
        section.page_width, section.page_height = Mm(geometry.width_mm), Mm(geometry.height_mm)
        margin = Mm(geometry.margin_mm + geometry.padding_mm)
        section.left_margin = section.right_margin = margin
        section.top_margin = section.bottom_margin = margin
        content_width_mm = geometry.width_mm - 2 * (geometry.margin_mm + geometry.padding_mm)
        content_height_mm = geometry.height_mm - 2 * (geometry.margin_mm + geometry.padding_mm) - 60

        style = doc.styles['Normal']
        style.font.name = 'Times New Roman'
        style.font.size = Pt(12)

        for page_index, page in enumerate(pages):
            if page.has_header:
                self._add_header(doc, page)
            for block in page.blocks:
                self._add_block(doc, block, content_width_mm, content_height_mm)
            if page_index < len(pages) - 1:
                doc.add_page_break()
        return doc

    @staticmethod
    def _add_header(doc: Document, page: Page) -> None:
        table = doc.add_table(rows=2, cols=2)
        cells = table.rows[0].cells
        cells[0].paragraphs[0].add_run(f"ID: {page.student_id}").bold = True
        right = cells[1].paragraphs[0]
        right.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        right.add_run(page.header_title).bold = True
        cells = table.rows[1].cells
        cells[0].paragraphs[0].add_run(page.student_name)
        right = cells[1].paragraphs[0]
        right.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        right.add_run(page.header_subtitle)

    @staticmethod
    def _add_styled(doc: Document, text: str, size: int, bold: bool = False, italic: bool = False,
                    color: Tuple[int, int, int] = (0, 0, 0), center: bool = False) -> None:
        paragraph = doc.add_paragraph()
        if center:
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = paragraph.add_run(text)
        run.font.size = Pt(size)
        run.bold = bold
        run.italic = italic
        run.font.color.rgb = RGBColor(*color)

    def _add_block(self, doc: Document, block: PageBlock, width_mm: float, height_mm: float) -> None:
        kind = block.kind
        if kind is BlockKind.HEADING:
            doc.add_heading(block.text, level=1)
        elif kind is BlockKind.FIELD:
            paragraph = doc.add_paragraph()
            paragraph.add_run(f"{block.text}: ").bold = True
            paragraph.add_run(block.value)
        elif kind is BlockKind.IMAGE:
            self._add_image(doc, block, width_mm, height_mm)
        elif kind is BlockKind.START_MARKER:
            self._add_styled(doc, block.text.upper(), 10, bold=True, color=(185, 28, 28))
        elif kind is BlockKind.END_MARKER:
            self._add_styled(doc, block.text.upper(), 10, bold=True, color=(29, 78, 216))
        elif kind is BlockKind.PLACEHOLDER:
            self._add_styled(doc, block.text, 11, italic=True, color=(150, 150, 150))
        elif kind in (BlockKind.LABEL, BlockKind.POINTS):
            self._add_styled(doc, block.text, 10, bold=kind is BlockKind.LABEL, color=(100, 100, 100))
        elif kind is BlockKind.FOOTER:
            self._add_styled(doc, block.text, 9, color=(150, 150, 150), center=True)
        else:
            doc.add_paragraph(block.text)

    def _add_image(self, doc: Document, block: PageBlock, width_mm: float, height_mm: float) -> None:
        try:
            data = decode_image_payload(block.image or "")
            px_width, px_height = image_size(data)
            if px_width <= 0 or px_height <= 0:
                raise ValueError("empty image")
            if px_height / px_width > height_mm / width_mm:
                doc.add_picture(io.BytesIO(data), height=Mm(height_mm))
            else:
                doc.add_picture(io.BytesIO(data), width=Mm(width_mm))
        except Exception as e:
            logger.warning("Skipping unreadable image: %s", e)
            self._add_styled(doc, IMAGE_ERROR_TEXT, 11, italic=True, color=(150, 150, 150))


def renderer_for(file_path: str) -> DocumentRenderer:
    """Pick the renderer matching the file extension; PDF unless it is ``.docx``."""
    if os.path.splitext(file_path)[1].lower() == WORD_EXTENSION:
        return DocxRenderer()
    return PdfRenderer()
