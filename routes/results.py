from fastapi import APIRouter, Depends
from models import ClassStatistics, ExamResults, ResultRow
from storage import ExamRepository, get_repository
from routes.exams import load_exam_or_404
from routes.records import filter_records, refresh_record
import aggregator
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def summarize(rows: List[ResultRow]) -> ClassStatistics:
    if not rows:
        return ClassStatistics()
    percentages = [r.percentage for r in rows]
    return ClassStatistics(
        count=len(rows),
        average_percentage=round(sum(percentages) / len(rows), 2),
        highest=max(percentages),
        lowest=min(percentages),
        pass_count=sum(1 for r in rows if r.passed),
    )


@router.get("/exams/{exam_id}/results", response_model=ExamResults)
def get_results(exam_id: str, search: Optional[str] = None,
                repo: ExamRepository = Depends(get_repository)):
    exam = load_exam_or_404(exam_id, repo)
    records = [refresh_record(exam, r) for r in repo.list_records(exam_id)]

    rows = []
    for record in filter_records(records, search):
        percentage = aggregator.compute_percentage(record.total, exam.total_marks)
        rows.append(ResultRow(
            student_id=record.student_id,
            co_marks=record.co_marks,
            total=record.total,
            percentage=percentage,
            band=aggregator.performance_band(percentage),
            passed=aggregator.is_pass(percentage),
        ))

    logger.info("GET /exams/%s/results — %d rows", exam_id, len(rows))
    return ExamResults(
        exam_id=exam.id,
        exam_name=exam.name,
        total_marks=exam.total_marks,
        co_max_marks=aggregator.co_max_marks(exam),
        rows=rows,
        statistics=summarize(rows),
    )
