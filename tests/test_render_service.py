from dataclasses import replace

import fitz
import pytest
from docx import Document

from models.page_models import BlockKind, PageGeometry
from models.submission_models import Answer, StudentIdentity
from services.pagination_service import paginate
from services.render_service import DocxRenderer, PdfRenderer, renderer_for
from utils.pdf_utils import decode_image_payload

IDENTITY = StudentIdentity(name="Ada Lovelace", student_id="S123")


@pytest.fixture
def pages(assignment, png_data_url):
    answers = {
        "p0_s0": Answer(text_answer="The derivative is $2x$."),
        "p0_s1": Answer(image_answers=[png_data_url, "data:image/png;base64,broken!!"]),
        "p1_s0": Answer(ai_reflective="Checked my algebra with a tool."),
    }
    return paginate(assignment, answers, IDENTITY)


def test_pdf_has_one_sheet_per_page(pages, tmp_path):
    path = str(tmp_path / "out.pdf")
    PdfRenderer().render(pages, PageGeometry(), path)
    with fitz.open(path) as doc:
        assert doc.page_count == len(pages)
        first = doc[0]
        assert round(first.rect.width) == 595
        assert "Ada Lovelace" in first.get_text()
        assert "End of Answer".upper() in doc[5].get_text().upper()


def test_pdf_bytes(pages):
    data = PdfRenderer().render_to_bytes(pages, PageGeometry())
    assert data.startswith(b"%PDF")


def test_docx_breaks_between_pages(pages, tmp_path):
    path = str(tmp_path / "out.docx")
    DocxRenderer().render(pages, PageGeometry(), path)
    doc = Document(path)
    assert doc.element.body.xml.count('w:type="page"') == len(pages) - 1
    assert len(doc.inline_shapes) == 1


def test_renderer_for_extension():
    assert isinstance(renderer_for("a/b.DOCX"), DocxRenderer)
    assert isinstance(renderer_for("a/b.pdf"), PdfRenderer)


class TestDecodeImagePayload:
    def test_data_url(self, png_data_url):
        assert decode_image_payload(png_data_url).startswith(b"\x89PNG")

    def test_bare_base64(self):
        assert decode_image_payload("aGVsbG8=") == b"hello"

    def test_invalid(self):
        with pytest.raises(ValueError):
            decode_image_payload("data:image/png;base64,***")


def _answer_sheet_text(assignment, text):
    pages = paginate(assignment, {"p0_s0": Answer(text_answer=text)}, IDENTITY)
    data = PdfRenderer().render_to_bytes(pages, PageGeometry())
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc[2].get_text()


@pytest.mark.parametrize("word_count", [150, 300, 400])
def test_long_answer_is_drawn_in_full(assignment, word_count):
    text = " ".join(f"word{i}" for i in range(word_count))
    sheet = _answer_sheet_text(assignment, text)
    assert "word0" in sheet
    assert f"word{word_count - 1}" in sheet
    assert "END OF ANSWER" in sheet.upper()


def test_oversized_answer_is_truncated_not_dropped(assignment, caplog):
    text = " ".join(f"word{i}" for i in range(5000))
    with caplog.at_level("WARNING", logger="services.render_service"):
        sheet = _answer_sheet_text(assignment, text)
    assert "word0" in sheet
    assert "word4999" not in sheet
    assert "[...]" in sheet
    assert "truncated" in caplog.text


def test_long_statement_leaves_room_for_heading_and_points(assignment):
    pages = paginate(assignment, {}, IDENTITY)
    statement = pages[1]
    blocks = [
        replace(block, text=" ".join(["lorem"] * 4000)) if block.kind is BlockKind.STATEMENT else block
        for block in statement.blocks
    ]
    data = PdfRenderer().render_to_bytes([replace(statement, blocks=blocks)], PageGeometry())
    with fitz.open(stream=data, filetype="pdf") as doc:
        sheet = doc[0].get_text()
    assert "Problem 1: Derivatives" in sheet
    assert "lorem" in sheet
