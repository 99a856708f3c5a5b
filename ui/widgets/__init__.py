from .submission_widget import SubmissionWidget
from .problem_widget import ProblemWidget
from .page_preview import PagePreviewWidget

__all__ = [
    "SubmissionWidget",
    "ProblemWidget",
    "PagePreviewWidget",
]
