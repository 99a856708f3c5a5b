# ui/widgets/problem_widget.py
from typing import Optional

from PyQt6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from models.assignment_models import Problem, format_points, part_letter, submission_key
from models.submission_models import SubmissionData
from .submission_widget import AnswerCallback, SubmissionWidget


class ProblemWidget(QFrame):
    """
    Editor card for one problem: its statement followed by one answer input per
    subsection.
    """

    def __init__(self, problem: Problem, problem_index: int, submission_data: SubmissionData,
                 on_change: AnswerCallback, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        layout = QVBoxLayout(self)

        title = f"Problem {problem_index + 1}"
        if problem.name:
            title += f": {problem.name}"
        header = QLabel(f"<b>{title}</b> &nbsp; ({format_points(problem.total_points)} Points)")
        layout.addWidget(header)
        if problem.description:
            description = QLabel(problem.description)
            description.setWordWrap(True)
            layout.addWidget(description)

        for s_idx, subsection in enumerate(problem.subsections):
            key = submission_key(problem_index, s_idx)
            part = f"Part {part_letter(s_idx)}"
            if subsection.name:
                part += f": {subsection.name}"
            layout.addWidget(QLabel(f"<b>{part}</b> ({format_points(subsection.points)} points)"))
            if subsection.description:
                statement = QLabel(subsection.description)
                statement.setWordWrap(True)
                layout.addWidget(statement)
            layout.addWidget(SubmissionWidget(key, subsection, submission_data.get(key), on_change, self))
