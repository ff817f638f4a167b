from fastapi import APIRouter, Depends, HTTPException
from models import ExamDefinition, MarksEntry, MarksPreview, RecordSaved, StudentRecord
from storage import ExamRepository, get_repository
from routes.exams import load_exam_or_404
import aggregator
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def refresh_record(exam: ExamDefinition, record: StudentRecord) -> StudentRecord:
    """Rebuild a stored record against the current exam definition.

    Marks were clamped against the definition in force when they were saved;
    an exam edit may since have lowered max marks or removed questions.
    """
    question_marks = aggregator.clamp_marks(exam, record.question_marks)
    return aggregator.build_student_record(exam, record.student_id, question_marks)


def filter_records(records: List[StudentRecord], search: Optional[str]) -> List[StudentRecord]:
    if not search:
        return records
    needle = search.lower()
    return [r for r in records if needle in r.student_id.lower()]


def _clean_student_id(student_id: str) -> str:
    """Normalise a student id from the URL; the same rule applies to every lookup."""
    student_id = student_id.strip()
    if not student_id:
        raise HTTPException(status_code=400, detail="Please enter student UID")
    return student_id


@router.post("/exams/{exam_id}/calculate", response_model=MarksPreview)
def calculate_marks(exam_id: str, entry: MarksEntry, repo: ExamRepository = Depends(get_repository)):
    exam = load_exam_or_404(exam_id, repo)
    question_marks = aggregator.clamp_marks(exam, entry.marks)
    co_marks = aggregator.compute_co_marks(exam, question_marks)
    total = aggregator.compute_total(co_marks)
    percentage = aggregator.compute_percentage(total, exam.total_marks)
    return MarksPreview(
        question_marks=question_marks,
        co_marks=co_marks,
        co_max_marks=aggregator.co_max_marks(exam),
        co_percentages=aggregator.co_percentages(exam, co_marks),
        question_percentages=aggregator.question_percentages(exam, question_marks),
        total=total,
        percentage=percentage,
        band=aggregator.performance_band(percentage),
    )


@router.get("/exams/{exam_id}/records", response_model=List[StudentRecord])
def list_records(exam_id: str, search: Optional[str] = None,
                 repo: ExamRepository = Depends(get_repository)):
    exam = load_exam_or_404(exam_id, repo)
    records = [refresh_record(exam, r) for r in repo.list_records(exam_id)]
    filtered = filter_records(records, search)
    logger.info("GET /exams/%s/records — returned %d of %d records", exam_id, len(filtered), len(records))
    return filtered


@router.get("/exams/{exam_id}/records/{student_id}", response_model=StudentRecord)
def get_record(exam_id: str, student_id: str, repo: ExamRepository = Depends(get_repository)):
    exam = load_exam_or_404(exam_id, repo)
    student_id = _clean_student_id(student_id)
    record = repo.get_record(exam_id, student_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No record for student {student_id}")
    return refresh_record(exam, record)


@router.put("/exams/{exam_id}/records/{student_id}", response_model=RecordSaved)
def save_record(exam_id: str, student_id: str, entry: MarksEntry,
                repo: ExamRepository = Depends(get_repository)):
    exam = load_exam_or_404(exam_id, repo)
    student_id = _clean_student_id(student_id)
    unknown = sorted(set(entry.marks) - {q.number for q in exam.questions})
    if unknown:
        logger.warning("PUT /exams/%s/records/%s — ignoring unknown questions: %s", exam_id, student_id, unknown)

    record = aggregator.build_student_record(exam, student_id, aggregator.clamp_marks(exam, entry.marks))
    record, created = repo.upsert_record(exam_id, record)
    logger.info("PUT /exams/%s/records/%s — %s, total: %d",
                exam_id, student_id, "saved" if created else "updated", record.total)
    return RecordSaved(record=record, created=created)


@router.delete("/exams/{exam_id}/records/{student_id}")
def delete_record(exam_id: str, student_id: str, repo: ExamRepository = Depends(get_repository)):
    load_exam_or_404(exam_id, repo)
    student_id = _clean_student_id(student_id)
    logger.info("DELETE /exams/%s/records/%s", exam_id, student_id)
    if not repo.delete_record(exam_id, student_id):
        logger.warning("DELETE /exams/%s/records/%s — no such record", exam_id, student_id)
        raise HTTPException(status_code=404, detail=f"No record for student {student_id}")
    return {"status": "ok"}
