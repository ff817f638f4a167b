import csv
import io
import openpyxl
from models import CourseOutcome, ExamDefinition, Question, StudentRecord
from routes.export import _build_rows, render_csv


# ── pure unit tests for _build_rows ──────────────────────────────────────────

EXAM = ExamDefinition(
    id="exam_1",
    name="Midterm",
    total_marks=20,
    course_outcomes=[CourseOutcome(code="CO1", description="a"), CourseOutcome(code="CO2", description="b")],
    questions=[Question(number="1", co_code="CO1", max_marks=10), Question(number="2", co_code="CO2", max_marks=10)],
)
RECORDS = [
    StudentRecord(student_id="S1", question_marks={"1": 8, "2": 9}, co_marks={"CO1": 8, "CO2": 9}, total=17),
    StudentRecord(student_id="S2", question_marks={"1": 5}, co_marks={"CO1": 5, "CO2": 0}, total=5),
]


def test_build_rows_headers():
    headers, _ = _build_rows(EXAM, RECORDS)
    assert headers == ["UID", "Q1 (CO1)", "Q2 (CO2)", "CO1", "CO2", "Total", "Percentage"]


def test_build_rows_values_in_definition_order():
    _, rows = _build_rows(EXAM, RECORDS)
    assert rows[0] == ["S1", 8, 9, 8, 9, 17, "85.00%"]
    assert rows[1] == ["S2", 5, 0, 5, 0, 5, "25.00%"]


def test_build_rows_zero_total_marks():
    exam = EXAM.model_copy(update={"total_marks": 0})
    _, rows = _build_rows(exam, RECORDS[:1])
    assert rows[0][-1] == "0.00%"


def test_render_csv_one_line_per_student():
    lines = render_csv(EXAM, RECORDS).splitlines()
    assert len(lines) == 3
    assert lines[0] == "UID,Q1 (CO1),Q2 (CO2),CO1,CO2,Total,Percentage"
    assert lines[1] == "S1,8,9,8,9,17,85.00%"


def test_render_csv_escapes_commas():
    record = StudentRecord(student_id='Doe, "J"', question_marks={}, co_marks={}, total=0)
    text = render_csv(EXAM, [record])
    row = list(csv.reader(io.StringIO(text)))[1]
    assert row[0] == 'Doe, "J"'
    assert len(row) == 7


# ── integration tests for export endpoints ───────────────────────────────────

def _enter(client, exam_id):
    client.put(f"/api/exams/{exam_id}/records/S1", json={"marks": {"1": 8, "2": 9}})
    client.put(f"/api/exams/{exam_id}/records/S2", json={"marks": {"1": 3, "2": 4}})


def test_export_csv_no_records(client, exam_id):
    resp = client.get(f"/api/exams/{exam_id}/export/csv")
    assert resp.status_code == 400


def test_export_csv_unknown_exam(client):
    assert client.get("/api/exams/exam_0/export/csv").status_code == 404


def test_export_csv_returns_csv(client, exam_id):
    _enter(client, exam_id)
    resp = client.get(f"/api/exams/{exam_id}/export/csv")
    assert resp.status_code == 200
    assert "text/csv" in resp.headers["content-type"]
    assert "Midterm_results.csv" in resp.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(resp.text)))
    assert len(rows) == 3
    assert rows[1] == ["S1", "8", "9", "8", "9", "17", "85.00%"]
    assert rows[2][0] == "S2"


def test_export_xlsx_returns_xlsx(client, exam_id):
    _enter(client, exam_id)
    resp = client.get(f"/api/exams/{exam_id}/export/xlsx")
    assert resp.status_code == 200
    content_type = resp.headers["content-type"]
    assert "spreadsheetml" in content_type or "officedocument" in content_type

    wb = openpyxl.load_workbook(io.BytesIO(resp.content))
    ws = wb.active
    values = list(ws.iter_rows(values_only=True))
    assert values[0][0] == "UID"
    assert values[1] == ("S1", 8, 9, 8, 9, 17, "85.00%")
    assert len(values) == 3
