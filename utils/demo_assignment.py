# utils/demo_assignment.py
"""A bundled sample assignment so the application can be tried without a file."""

from models.assignment_models import Assignment
from utils.schema_validator import validate_assignment

DEMO_LOADED_MESSAGE = "Demo assignment loaded! Try all features - your work is automatically saved."

DEMO_ASSIGNMENT_DATA = {
    "id": "demo-math-101",
    "courseCode": "MATH 101",
    "title": "Sample Mathematics Assignment - Demo",
    "dueDate": "",
    "dueTime": "",
    "preamble": (
        "Welcome to this demo assignment! You can enter text answers with LaTeX math "
        "($...$ for inline math, $$...$$ for display math), upload images of handwritten "
        "work, document your AI tool usage, and preview and download your submission as a PDF. "
        "Your work is saved automatically."
    ),
    "problems": [
        {
            "id": "p1",
            "name": "Calculus - Derivatives and Integrals",
            "description": "Demonstrate your understanding of fundamental calculus concepts.",
            "subsections": [
                {
                    "id": "p1a",
                    "name": "Derivative",
                    "description": ("Find the derivative of the following function and show your work:\n\n"
                                    "$$f(x) = 3x^4 - 2x^3 + 5x^2 - 7x + 1$$"),
                    "points": 10,
                    "submissionType": "Text",
                    "maxImages": 0,
                },
                {
                    "id": "p1b",
                    "name": "Definite integral",
                    "description": "Evaluate $$\\int_0^2 (x^2 + 2x) \\, dx$$ and show all steps.",
                    "points": 10,
                    "submissionType": "Text",
                    "maxImages": 0,
                },
                {
                    "id": "p1c",
                    "name": "Sketch",
                    "description": ("Sketch the graph of $f(x) = x^3 - 3x$ on paper, marking all critical "
                                    "points, inflection points and intercepts. Upload a photo of your work."),
                    "points": 5,
                    "submissionType": "Image",
                    "maxImages": 2,
                },
            ],
        },
        {
            "id": "p2",
            "name": "Physics - Kinematics",
            "description": ("A ball is thrown vertically upward from ground level with an initial velocity "
                            "of $v_0 = 20$ m/s. Assume $g = 10$ m/s$^2$ and neglect air resistance."),
            "subsections": [
                {
                    "id": "p2a",
                    "name": "Maximum height",
                    "description": "Calculate the maximum height reached by the ball.",
                    "points": 8,
                    "submissionType": "Text",
                    "maxImages": 0,
                },
                {
                    "id": "p2b",
                    "name": "Time of flight",
                    "description": "Determine the total time the ball is in the air. Express your answer with units.",
                    "points": 7,
                    "submissionType": "Text",
                    "maxImages": 0,
                },
                {
                    "id": "p2c",
                    "name": "Graphs",
                    "description": "Draw a velocity-time graph and a position-time graph. Upload your sketches.",
                    "points": 10,
                    "submissionType": "Image",
                    "maxImages": 3,
                },
            ],
        },
        {
            "id": "p3",
            "name": "AI-Assisted Problem Solving",
            "description": "Use and document AI assistance in solving a problem.",
            "subsections": [
                {
                    "id": "p3a",
                    "name": "Differential equation",
                    "description": ("Solve $$\\frac{dy}{dx} = 2xy$$ with $y(0) = 1$. You may use AI tools, "
                                    "but you MUST document your process."),
                    "points": 10,
                    "submissionType": "AI Reflective",
                    "maxImages": 0,
                },
            ],
        },
    ],
}


def load_demo_assignment() -> Assignment:
    return validate_assignment(DEMO_ASSIGNMENT_DATA)
