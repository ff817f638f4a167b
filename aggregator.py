"""Marks aggregation: per-question marks rolled up into CO totals and percentages.

Everything here is pure. Callers clamp raw input with clamp_mark / clamp_marks
before aggregating; the compute_* functions trust their input.
"""
import math
from typing import Dict, Mapping

from models import ExamDefinition, StudentRecord

PASS_PERCENTAGE = 40

# (lower bound, band) checked top-down
_BANDS = (
    (80, "excellent"),
    (60, "good"),
    (40, "average"),
)


def clamp_mark(awarded: int, max_marks: int) -> int:
    """Clamp *awarded* into [0, max_marks]."""
    return min(max(awarded, 0), max_marks)


def clamp_marks(exam: ExamDefinition, raw_marks: Mapping[str, float]) -> Dict[str, int]:
    """Clamp a raw marks entry against the exam's questions.

    Every question of the exam gets an entry (0 when missing); fractional
    marks are truncated toward zero; marks for question numbers the exam
    does not define are dropped.
    """
    return {
        q.number: clamp_mark(int(raw_marks.get(q.number) or 0), q.max_marks)
        for q in exam.questions
    }


def compute_co_marks(exam: ExamDefinition, question_marks: Mapping[str, int]) -> Dict[str, int]:
    co_marks = {co.code: 0 for co in exam.course_outcomes}
    for q in exam.questions:
        if q.co_code not in co_marks:
            # unmapped question: dropped from every CO bucket
            continue
        co_marks[q.co_code] += question_marks.get(q.number, 0)
    return co_marks


def compute_total(co_marks: Mapping[str, int]) -> int:
    return sum(co_marks.values())


def percentage_ratio(score: float, denominator: float) -> float:
    """Unrounded percentage; 0.0 when *denominator* is zero."""
    if denominator == 0:
        return 0.0
    return 100 * score / denominator


def compute_percentage(score: float, denominator: float) -> int:
    """Whole-number percentage, rounding halves up. Returns 0 for a zero denominator."""
    return int(math.floor(percentage_ratio(score, denominator) + 0.5))


def co_max_marks(exam: ExamDefinition) -> Dict[str, int]:
    """Maximum attainable marks per CO."""
    maxima = {co.code: 0 for co in exam.course_outcomes}
    for q in exam.questions:
        if q.co_code in maxima:
            maxima[q.co_code] += q.max_marks
    return maxima


def co_percentages(exam: ExamDefinition, co_marks: Mapping[str, int]) -> Dict[str, int]:
    maxima = co_max_marks(exam)
    return {
        code: compute_percentage(co_marks.get(code, 0), maxima[code])
        for code in maxima
    }


def question_percentages(exam: ExamDefinition, question_marks: Mapping[str, int]) -> Dict[str, int]:
    return {
        q.number: compute_percentage(question_marks.get(q.number, 0), q.max_marks)
        for q in exam.questions
    }


def performance_band(percentage: float) -> str:
    for lower, band in _BANDS:
        if percentage >= lower:
            return band
    return "poor"


def is_pass(percentage: float) -> bool:
    return percentage >= PASS_PERCENTAGE


def build_student_record(exam: ExamDefinition, student_id: str,
                         question_marks: Mapping[str, int]) -> StudentRecord:
    """Assemble a StudentRecord with freshly computed co_marks and total."""
    co_marks = compute_co_marks(exam, question_marks)
    return StudentRecord(
        student_id=student_id,
        question_marks=dict(question_marks),
        co_marks=co_marks,
        total=compute_total(co_marks),
    )
