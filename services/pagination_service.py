# services/pagination_service.py
"""Lay out an assignment and the student's answers as a fixed sequence of pages.

The layout is deterministic and depends only on the assignment structure:

* one title page,
* per problem, one statement page,
* per subsection, one primary answer page plus ``maxImages - 1`` overflow
  pages when the subsection has more than one image slot.

Answers only change what is printed on those pages, never how many there are,
so a grader always finds every part at the same page position.
"""
import logging
from typing import Callable, List, Optional

from models.assignment_models import (
    Assignment, Problem, Subsection, SubmissionType, format_points, part_letter, submission_key
)
from models.page_models import BlockKind, Page, PageBlock, PageKind
from models.submission_models import Answer, StudentIdentity, SubmissionData
from utils.constants import (
    AI_REFLECTION_LABEL, END_MARKER_TEXT, GENERATED_BY_TEXT, NO_ANSWER_TEXT, NO_IMAGE_TEXT, START_MARKER_TEXT
)

logger = logging.getLogger(__name__)

MarkupFormatter = Callable[[str], str]


def _identity_markup(text: str) -> str:
    return text


def expected_page_count(assignment: Assignment) -> int:
    """Number of pages ``paginate`` produces for ``assignment``, whatever the answers."""
    return 1 + sum(
        1 + sum(1 + max(sub.max_images - 1, 0) for sub in problem.subsections)
        for problem in assignment.problems
    )


class PaginationService:
    """Builds the page sequence of the exported document.

    Attributes:
        markup (MarkupFormatter): Formatting pass applied to statements and answers
            before they are placed on a page. Identity by default.
    """

    def __init__(self, markup: Optional[MarkupFormatter] = None) -> None:
        self.markup: MarkupFormatter = markup or _identity_markup

    def paginate(
        self,
        assignment: Assignment,
        submission_data: SubmissionData,
        identity: StudentIdentity,
    ) -> List[Page]:
        """Produce the ordered pages of the document.

        Args:
            assignment (Assignment): The loaded assignment.
            submission_data (SubmissionData): The student's answers. Keys that match
                no subsection are ignored; missing keys render as "not submitted".
            identity (StudentIdentity): Name and ID printed on every page.

        Returns:
            List[Page]: Title page, then statement and answer pages in document order.
        """
        self._check_inputs(assignment, submission_data)

        pages = [self._title_page(assignment, identity)]
        for p_idx, problem in enumerate(assignment.problems):
            pages.append(self._statement_page(assignment, problem, p_idx, identity))
            for s_idx, subsection in enumerate(problem.subsections):
                answer = submission_data.get(submission_key(p_idx, s_idx))
                pages.extend(self._subsection_pages(assignment, subsection, p_idx, s_idx, answer, identity))

        logger.debug("Paginated %s into %d pages", assignment.course_code, len(pages))
        return pages

    def _check_inputs(self, assignment: Assignment, submission_data: SubmissionData) -> None:
        declared = assignment.declared_total_points
        if declared is not None and declared != assignment.total_points:
            logger.warning(
                "Declared total of %s points does not match the subsection sum of %s; using the sum",
                format_points(declared), format_points(assignment.total_points),
            )
        orphaned = set(submission_data) - set(assignment.subsection_keys())
        if orphaned:
            logger.debug("Ignoring %d answers with no matching subsection: %s",
                         len(orphaned), sorted(orphaned))

    def _page(self, kind: PageKind, assignment: Assignment, subtitle: str,
              identity: StudentIdentity, blocks: List[PageBlock], **position) -> Page:
        return Page(
            kind=kind,
            header_title=assignment.course_code,
            header_subtitle=subtitle,
            student_name=identity.name,
            student_id=identity.student_id,
            blocks=blocks,
            **position,
        )

    def _title_page(self, assignment: Assignment, identity: StudentIdentity) -> Page:
        blocks = [
            PageBlock(BlockKind.HEADING, assignment.course_code),
            PageBlock(BlockKind.STATEMENT, assignment.title),
            PageBlock(BlockKind.FIELD, "Student Name", value=identity.name),
            PageBlock(BlockKind.FIELD, "Student ID", value=identity.student_id),
            PageBlock(BlockKind.FIELD, "Total Points", value=format_points(assignment.total_points)),
            PageBlock(BlockKind.FOOTER, GENERATED_BY_TEXT),
        ]
        return self._page(PageKind.TITLE, assignment, "", identity, blocks)

    def _statement_page(self, assignment: Assignment, problem: Problem, p_idx: int,
                        identity: StudentIdentity) -> Page:
        number = p_idx + 1
        heading = f"Problem {number}: {problem.name}" if problem.name else f"Problem {number}"
        blocks = [
            PageBlock(BlockKind.HEADING, heading),
            PageBlock(BlockKind.POINTS, f"{format_points(problem.total_points)} Points"),
        ]
        if problem.description:
            blocks.append(PageBlock(BlockKind.STATEMENT, self.markup(problem.description)))
        return self._page(PageKind.STATEMENT, assignment, f"Problem {number}", identity, blocks,
                          problem_index=p_idx)

    def _subsection_pages(self, assignment: Assignment, subsection: Subsection, p_idx: int, s_idx: int,
                          answer: Optional[Answer], identity: StudentIdentity) -> List[Page]:
        number, letter = p_idx + 1, part_letter(s_idx)
        heading = f"Part {letter}: {subsection.name}" if subsection.name else f"Part {letter}"
        blocks = [
            PageBlock(BlockKind.HEADING, heading),
            PageBlock(BlockKind.POINTS, f"({format_points(subsection.points)} points)"),
        ]
        if subsection.description:
            blocks.append(PageBlock(BlockKind.STATEMENT, self.markup(subsection.description)))
        blocks.append(PageBlock(BlockKind.START_MARKER, START_MARKER_TEXT))
        blocks.extend(self._answer_blocks(subsection, answer))
        if not subsection.has_overflow_pages:
            blocks.append(PageBlock(BlockKind.END_MARKER, END_MARKER_TEXT))

        pages = [self._page(PageKind.ANSWER, assignment, f"Problem {number} - Part ({letter})", identity,
                            blocks, problem_index=p_idx, subsection_index=s_idx)]
        if subsection.has_overflow_pages:
            pages.extend(self._overflow_pages(assignment, subsection, p_idx, s_idx, answer, identity))
        return pages

    def _answer_blocks(self, subsection: Subsection, answer: Optional[Answer]) -> List[PageBlock]:
        """Blocks for the primary answer page, following the subsection's answer kind."""
        placeholder = [PageBlock(BlockKind.PLACEHOLDER, NO_ANSWER_TEXT)]
        if answer is None:
            return placeholder

        kind = subsection.answer_kind
        if kind is SubmissionType.IMAGE:
            images = answer.images
            if not images:
                return placeholder
            slots = max(subsection.max_images, 1)
            if len(images) > slots:
                logger.warning("Subsection %s has %d images but only %d slots; extra images are not printed",
                               subsection.id, len(images), slots)
            return [
                PageBlock(BlockKind.LABEL, f"Image 1 of {slots}"),
                PageBlock(BlockKind.IMAGE, image=images[0]),
            ]
        if kind is SubmissionType.AI_REFLECTIVE:
            if not answer.ai_reflective:
                return placeholder
            return [
                PageBlock(BlockKind.LABEL, AI_REFLECTION_LABEL),
                PageBlock(BlockKind.TEXT, self.markup(answer.ai_reflective)),
            ]
        if not answer.text_answer:
            return placeholder
        return [PageBlock(BlockKind.TEXT, self.markup(answer.text_answer))]

    def _overflow_pages(self, assignment: Assignment, subsection: Subsection, p_idx: int, s_idx: int,
                        answer: Optional[Answer], identity: StudentIdentity) -> List[Page]:
        images = answer.images if answer else []
        number, letter = p_idx + 1, part_letter(s_idx)
        last_slot = subsection.max_images - 1
        pages = []
        for slot in range(1, subsection.max_images):
            blocks = [PageBlock(BlockKind.LABEL, f"Image {slot + 1} of {subsection.max_images}")]
            if slot < len(images):
                blocks.append(PageBlock(BlockKind.IMAGE, image=images[slot]))
            else:
                blocks.append(PageBlock(BlockKind.PLACEHOLDER, NO_IMAGE_TEXT))
            if slot == last_slot:
                blocks.append(PageBlock(BlockKind.END_MARKER, END_MARKER_TEXT))
            pages.append(self._page(
                PageKind.OVERFLOW, assignment, f"Problem {number}({letter}) - Image {slot + 1}", identity,
                blocks, problem_index=p_idx, subsection_index=s_idx, image_slot=slot,
            ))
        return pages


def paginate(
    assignment: Assignment,
    submission_data: SubmissionData,
    identity: StudentIdentity,
    markup: Optional[MarkupFormatter] = None,
) -> List[Page]:
    """Shortcut for ``PaginationService(markup).paginate(...)``."""
    return PaginationService(markup).paginate(assignment, submission_data, identity)
