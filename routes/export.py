from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from models import ExamDefinition, StudentRecord
from storage import ExamRepository, get_repository
from routes.exams import load_exam_or_404
from routes.records import refresh_record
import aggregator
import csv
import io
import re
import logging
import openpyxl
from typing import List

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_rows(exam: ExamDefinition, records: List[StudentRecord]):
    """Return (headers, rows) for the results report, columns in definition order."""
    headers = ["UID"]
    headers += [f"Q{q.number} ({q.co_code})" for q in exam.questions]
    headers += exam.co_codes()
    headers += ["Total", "Percentage"]

    rows = []
    for record in records:
        row = [record.student_id]
        row += [record.question_marks.get(q.number, 0) for q in exam.questions]
        row += [record.co_marks.get(code, 0) for code in exam.co_codes()]
        pct = aggregator.percentage_ratio(record.total, exam.total_marks)
        row += [record.total, f"{pct:.2f}%"]
        rows.append(row)

    return headers, rows


def _export_filename(exam: ExamDefinition, ext: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9 _.-]", "_", exam.name).strip() or exam.id
    return f"{stem}_results.{ext}"


def _load_for_export(exam_id: str, repo: ExamRepository):
    exam = load_exam_or_404(exam_id, repo)
    records = [refresh_record(exam, r) for r in repo.list_records(exam_id)]
    if not records:
        logger.warning("export %s — no records to export", exam_id)
        raise HTTPException(status_code=400, detail="No records to export")
    return exam, records


def render_csv(exam: ExamDefinition, records: List[StudentRecord]) -> str:
    headers, rows = _build_rows(exam, records)
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


@router.get("/exams/{exam_id}/export/csv")
def export_results_csv(exam_id: str, repo: ExamRepository = Depends(get_repository)):
    exam, records = _load_for_export(exam_id, repo)
    text = render_csv(exam, records)
    logger.info("export %s — CSV with %d rows", exam_id, len(records))

    return StreamingResponse(
        iter([text]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{_export_filename(exam, "csv")}"'},
    )


@router.get("/exams/{exam_id}/export/xlsx")
def export_results_xlsx(exam_id: str, repo: ExamRepository = Depends(get_repository)):
    exam, records = _load_for_export(exam_id, repo)
    headers, rows = _build_rows(exam, records)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Results"

    ws.append(headers)
    for row in rows:
        ws.append(row)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    logger.info("export %s — XLSX with %d rows", exam_id, len(records))

    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{_export_filename(exam, "xlsx")}"'},
    )
