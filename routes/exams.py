from fastapi import APIRouter, Depends, HTTPException
from models import ExamDefinition, ExamSetup, ExamSummary
from storage import ExamRepository, get_repository
from validation import ExamValidationError, validate_setup
from typing import List
import time
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def load_exam_or_404(exam_id: str, repo: ExamRepository) -> ExamDefinition:
    exam = repo.load(exam_id)
    if exam is None:
        logger.warning("exam not found: %s", exam_id)
        raise HTTPException(status_code=404, detail=f"Exam not found: {exam_id}")
    return exam


def _validated(setup: ExamSetup, action: str) -> ExamSetup:
    try:
        return validate_setup(setup)
    except ExamValidationError as e:
        logger.warning("%s — rejected setup '%s': %s", action, setup.name, e)
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/exams", response_model=List[ExamSummary])
def list_exams(repo: ExamRepository = Depends(get_repository)):
    exams = repo.list_exams()
    logger.info("GET /exams — returned %d exams", len(exams))
    return exams


@router.post("/exams", response_model=ExamDefinition, status_code=201)
def create_exam(setup: ExamSetup, repo: ExamRepository = Depends(get_repository)):
    logger.info("POST /exams — name: %s", setup.name)
    clean = _validated(setup, "POST /exams")
    now = time.time()
    exam_id = f"exam_{int(now * 1000)}"
    while repo.load(exam_id) is not None:
        now += 0.001
        exam_id = f"exam_{int(now * 1000)}"
    exam = ExamDefinition(id=exam_id, created_at=now, **clean.model_dump())
    repo.save(exam)
    logger.info("POST /exams — created %s with %d COs and %d questions",
                exam.id, len(exam.course_outcomes), len(exam.questions))
    return exam


@router.get("/exams/{exam_id}", response_model=ExamDefinition)
def get_exam(exam_id: str, repo: ExamRepository = Depends(get_repository)):
    return load_exam_or_404(exam_id, repo)


@router.put("/exams/{exam_id}", response_model=ExamDefinition)
def update_exam(exam_id: str, setup: ExamSetup, repo: ExamRepository = Depends(get_repository)):
    logger.info("PUT /exams/%s — name: %s", exam_id, setup.name)
    existing = load_exam_or_404(exam_id, repo)
    clean = _validated(setup, f"PUT /exams/{exam_id}")
    # existing student records keep their keys; renamed COs/questions are not re-keyed
    exam = ExamDefinition(id=existing.id, created_at=existing.created_at, **clean.model_dump())
    repo.save(exam)
    logger.info("PUT /exams/%s — saved", exam_id)
    return exam


@router.delete("/exams/{exam_id}")
def delete_exam(exam_id: str, repo: ExamRepository = Depends(get_repository)):
    logger.info("DELETE /exams/%s — deleting exam and its records", exam_id)
    if not repo.delete(exam_id):
        raise HTTPException(status_code=404, detail=f"Exam not found: {exam_id}")
    return {"status": "ok"}
