# models/page_models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class PageKind(str, Enum):
    TITLE = "title"
    STATEMENT = "statement"
    ANSWER = "answer"
    OVERFLOW = "overflow"


class BlockKind(str, Enum):
    HEADING = "heading"
    POINTS = "points"
    STATEMENT = "statement"
    TEXT = "text"
    LABEL = "label"
    IMAGE = "image"
    PLACEHOLDER = "placeholder"
    FIELD = "field"
    START_MARKER = "start_marker"
    END_MARKER = "end_marker"
    FOOTER = "footer"


@dataclass(frozen=True)
class PageBlock:
    """One piece of content on a page, laid out top to bottom by the renderer.

    Attributes:
        kind (BlockKind): How the renderer should style the block.
        text (str): Text content; for FIELD blocks the label.
        value (str): FIELD value (e.g. the student name next to its label).
        image (Optional[str]): Image payload (data URL) for IMAGE blocks.
    """
    kind: BlockKind
    text: str = ""
    value: str = ""
    image: Optional[str] = None


@dataclass(frozen=True)
class Page:
    """One physical sheet of the exported document.

    Attributes:
        kind (PageKind): Title, problem statement, primary answer or overflow page.
        header_title (str): Right-hand header title (the course code).
        header_subtitle (str): Right-hand header subtitle, e.g. "Problem 1 - Part (a)".
        student_name (str): Left-hand header name.
        student_id (str): Left-hand header ID.
        blocks (List[PageBlock]): Content in reading order.
        problem_index (Optional[int]): 0-based problem index, None on the title page.
        subsection_index (Optional[int]): 0-based subsection index for answer pages.
        image_slot (Optional[int]): 0-based image slot shown on an overflow page.
    """
    kind: PageKind
    header_title: str = ""
    header_subtitle: str = ""
    student_name: str = ""
    student_id: str = ""
    blocks: List[PageBlock] = field(default_factory=list)
    problem_index: Optional[int] = None
    subsection_index: Optional[int] = None
    image_slot: Optional[int] = None

    @property
    def has_header(self) -> bool:
        return self.kind is not PageKind.TITLE

    @property
    def has_start_marker(self) -> bool:
        return any(block.kind is BlockKind.START_MARKER for block in self.blocks)

    @property
    def has_end_marker(self) -> bool:
        return any(block.kind is BlockKind.END_MARKER for block in self.blocks)


@dataclass(frozen=True)
class PageGeometry:
    """Fixed physical layout handed to the renderer with the page sequence.

    Attributes:
        width_mm (float): Sheet width.
        height_mm (float): Sheet height.
        margin_mm (float): Outer printer margin; zero so every Page fills one sheet.
        padding_mm (float): Inner padding applied by the page layout itself.
        scale (float): Rasterization scale used for previews.
    """
    width_mm: float = 210.0
    height_mm: float = 297.0
    margin_mm: float = 0.0
    padding_mm: float = 20.0
    scale: float = 2.0

    @staticmethod
    def mm_to_pt(mm: float) -> float:
        return mm * 72.0 / 25.4

    @property
    def width_pt(self) -> float:
        return self.mm_to_pt(self.width_mm)

    @property
    def height_pt(self) -> float:
        return self.mm_to_pt(self.height_mm)

    @property
    def padding_pt(self) -> float:
        return self.mm_to_pt(self.margin_mm + self.padding_mm)
