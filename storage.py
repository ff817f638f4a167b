"""JSON file persistence for exam definitions and student records.

Layout under DATA_DIR:
    exams_list.json          summaries shown on the home screen
    exams/<exam_id>.json     one ExamDefinition
    records/<exam_id>.json   list of StudentRecord for that exam

Every write replaces a whole file. Two writers racing on the same exam
(e.g. two browser tabs) do not lock; the last one wins.
"""
import json
import os
import logging
from typing import List, Optional, Tuple

from models import ExamDefinition, ExamSummary, StudentRecord

logger = logging.getLogger(__name__)

DATA_DIR = os.environ.get("CO_MARKS_DATA_DIR", "./data")


def _read_json(path: str, default):
    if not os.path.exists(path):
        return default
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: str, data) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _is_safe_id(exam_id: str) -> bool:
    return bool(exam_id) and not exam_id.startswith(".") and os.sep not in exam_id and "/" not in exam_id


class ExamRepository:
    """Load/save exams and their student records below *data_dir*."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    # ── paths ────────────────────────────────────────────────────────────────

    @property
    def _list_path(self) -> str:
        return os.path.join(self.data_dir, "exams_list.json")

    def _exam_path(self, exam_id: str) -> str:
        return os.path.join(self.data_dir, "exams", f"{exam_id}.json")

    def _records_path(self, exam_id: str) -> str:
        return os.path.join(self.data_dir, "records", f"{exam_id}.json")

    # ── exams ────────────────────────────────────────────────────────────────

    def list_exams(self) -> List[ExamSummary]:
        """Exam summaries, newest first."""
        items = [ExamSummary(**item) for item in _read_json(self._list_path, [])]
        return sorted(items, key=lambda s: s.created_at, reverse=True)

    def load(self, exam_id: str) -> Optional[ExamDefinition]:
        if not _is_safe_id(exam_id):
            return None
        data = _read_json(self._exam_path(exam_id), None)
        if data is None:
            return None
        return ExamDefinition(**data)

    def save(self, exam: ExamDefinition) -> None:
        if not _is_safe_id(exam.id):
            raise ValueError(f"invalid exam id: {exam.id!r}")
        _write_json(self._exam_path(exam.id), exam.model_dump())

        summary = ExamSummary(
            id=exam.id,
            name=exam.name,
            total_marks=exam.total_marks,
            co_count=len(exam.course_outcomes),
            question_count=len(exam.questions),
            created_at=exam.created_at,
        )
        items = [item for item in _read_json(self._list_path, []) if item.get("id") != exam.id]
        items.append(summary.model_dump())
        _write_json(self._list_path, items)
        logger.debug("saved exam %s (%d exams listed)", exam.id, len(items))

    def delete(self, exam_id: str) -> bool:
        """Remove the exam, its records and its list entry. False if it did not exist."""
        if not _is_safe_id(exam_id):
            return False
        existed = False
        for path in (self._exam_path(exam_id), self._records_path(exam_id)):
            if os.path.exists(path):
                os.remove(path)
                existed = True
        items = _read_json(self._list_path, [])
        remaining = [item for item in items if item.get("id") != exam_id]
        if len(remaining) != len(items):
            existed = True
            _write_json(self._list_path, remaining)
        return existed

    # ── student records ──────────────────────────────────────────────────────

    def list_records(self, exam_id: str) -> List[StudentRecord]:
        if not _is_safe_id(exam_id):
            return []
        return [StudentRecord(**item) for item in _read_json(self._records_path(exam_id), [])]

    def _save_records(self, exam_id: str, records: List[StudentRecord]) -> None:
        _write_json(self._records_path(exam_id), [r.model_dump() for r in records])

    def get_record(self, exam_id: str, student_id: str) -> Optional[StudentRecord]:
        for record in self.list_records(exam_id):
            if record.student_id == student_id:
                return record
        return None

    def upsert_record(self, exam_id: str, record: StudentRecord) -> Tuple[StudentRecord, bool]:
        """Insert or replace the record for record.student_id.

        Returns (record, created). A replaced record keeps its position.
        """
        records = self.list_records(exam_id)
        for i, existing in enumerate(records):
            if existing.student_id == record.student_id:
                records[i] = record
                created = False
                break
        else:
            records.append(record)
            created = True
        self._save_records(exam_id, records)
        return record, created

    def delete_record(self, exam_id: str, student_id: str) -> bool:
        records = self.list_records(exam_id)
        remaining = [r for r in records if r.student_id != student_id]
        if len(remaining) == len(records):
            return False
        self._save_records(exam_id, remaining)
        return True


def get_repository() -> ExamRepository:
    """FastAPI dependency; reads DATA_DIR at call time so tests can redirect it."""
    return ExamRepository(DATA_DIR)
