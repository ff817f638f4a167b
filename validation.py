"""Exam setup validation."""
import logging
from typing import List

from models import CourseOutcome, ExamSetup, Question

logger = logging.getLogger(__name__)


class ExamValidationError(ValueError):
    """Setup rejected; the message is meant to be shown to the user as-is."""


def _filled_outcomes(outcomes: List[CourseOutcome]) -> List[CourseOutcome]:
    return [
        CourseOutcome(code=co.code.strip(), description=co.description.strip())
        for co in outcomes
        if co.code.strip() and co.description.strip()
    ]


def _filled_questions(questions: List[Question]) -> List[Question]:
    return [
        Question(
            number=q.number.strip(),
            statement=q.statement.strip(),
            co_code=q.co_code.strip(),
            max_marks=q.max_marks,
        )
        for q in questions
        if q.number.strip() and q.co_code.strip() and q.max_marks > 0
    ]


def validate_setup(setup: ExamSetup) -> ExamSetup:
    """Check *setup* and return a copy with blank CO/question rows removed.

    Raises ExamValidationError on the first problem found.
    """
    name = setup.name.strip()
    if not name:
        raise ExamValidationError("Please enter exam name")
    if setup.total_marks <= 0:
        raise ExamValidationError("Please enter valid total marks")
    if not setup.course_outcomes or not setup.course_outcomes[0].code.strip():
        raise ExamValidationError("Please add at least one CO")
    if not setup.questions or not setup.questions[0].number.strip():
        raise ExamValidationError("Please add at least one question")

    outcomes = _filled_outcomes(setup.course_outcomes)
    questions = _filled_questions(setup.questions)
    dropped = (len(setup.course_outcomes) - len(outcomes)) + (len(setup.questions) - len(questions))
    if dropped:
        logger.info("validate_setup — dropped %d incomplete rows from '%s'", dropped, name)

    if not outcomes:
        raise ExamValidationError("Please add at least one CO with a code and description")
    if not questions:
        raise ExamValidationError("Please add at least one question with a CO and positive marks")

    codes = set()
    for co in outcomes:
        if co.code in codes:
            raise ExamValidationError(f"Duplicate CO code: {co.code}")
        codes.add(co.code)

    numbers = set()
    for q in questions:
        if q.number in numbers:
            raise ExamValidationError(f"Duplicate question number: {q.number}")
        numbers.add(q.number)
        if q.co_code not in codes:
            raise ExamValidationError(f"Question {q.number} references unknown CO: {q.co_code}")

    return ExamSetup(
        name=name,
        total_marks=setup.total_marks,
        course_outcomes=outcomes,
        questions=questions,
    )
