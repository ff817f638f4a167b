import logging
import copy
from conftest import SETUP


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_list_exams_empty(client):
    resp = client.get("/api/exams")
    assert resp.status_code == 200
    assert resp.json() == []


def test_create_and_get_exam(client):
    resp = client.post("/api/exams", json=SETUP)
    assert resp.status_code == 201
    exam = resp.json()
    assert exam["id"].startswith("exam_")
    assert exam["created_at"] > 0

    fetched = client.get(f"/api/exams/{exam['id']}").json()
    assert fetched["name"] == "Midterm"
    assert [q["co_code"] for q in fetched["questions"]] == ["CO1", "CO2"]


def test_create_exam_rejects_missing_name(client):
    resp = client.post("/api/exams", json={**SETUP, "name": ""})
    assert resp.status_code == 400
    assert "exam name" in resp.json()["detail"]
    assert client.get("/api/exams").json() == []


def test_create_exam_rejects_unmapped_question(client):
    data = copy.deepcopy(SETUP)
    data["questions"][1]["co_code"] = "CO7"
    resp = client.post("/api/exams", json=data)
    assert resp.status_code == 400
    assert "CO7" in resp.json()["detail"]


def test_list_exams_newest_first(client):
    first = client.post("/api/exams", json={**SETUP, "name": "First"}).json()
    second = client.post("/api/exams", json={**SETUP, "name": "Second"}).json()
    assert first["id"] != second["id"]

    listed = client.get("/api/exams").json()
    assert [e["name"] for e in listed] == ["Second", "First"]
    assert listed[0]["co_count"] == 2
    assert listed[0]["question_count"] == 2


def test_get_unknown_exam_404(client):
    assert client.get("/api/exams/exam_0").status_code == 404


def test_update_exam_keeps_id(client, exam_id):
    created_at = client.get(f"/api/exams/{exam_id}").json()["created_at"]
    resp = client.put(f"/api/exams/{exam_id}", json={**SETUP, "name": "Midterm v2", "total_marks": 25})
    assert resp.status_code == 200
    exam = resp.json()
    assert exam["id"] == exam_id
    assert exam["created_at"] == created_at
    assert exam["total_marks"] == 25

    listed = client.get("/api/exams").json()
    assert len(listed) == 1
    assert listed[0]["name"] == "Midterm v2"


def test_update_exam_invalid_leaves_original(client, exam_id):
    resp = client.put(f"/api/exams/{exam_id}", json={**SETUP, "total_marks": 0})
    assert resp.status_code == 400
    assert client.get(f"/api/exams/{exam_id}").json()["total_marks"] == 20


def test_update_unknown_exam_404(client):
    assert client.put("/api/exams/exam_0", json=SETUP).status_code == 404


def test_delete_exam_removes_records(client, exam_id):
    client.put(f"/api/exams/{exam_id}/records/S1", json={"marks": {"1": 5}})

    resp = client.delete(f"/api/exams/{exam_id}")
    assert resp.status_code == 200
    assert client.get(f"/api/exams/{exam_id}").status_code == 404
    assert client.get("/api/exams").json() == []


def test_delete_unknown_exam_404(client):
    assert client.delete("/api/exams/exam_0").status_code == 404


def test_request_log_line(client, caplog):
    with caplog.at_level(logging.INFO, logger="main"):
        client.get("/api/exams", params={"search": "x"})
        client.get("/api/exams/exam_0")

    lines = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "main"]
    assert any(level == logging.INFO and msg.startswith("GET /api/exams?search=x -> 200") for level, msg in lines)
    assert any(level == logging.WARNING and msg.startswith("GET /api/exams/exam_0 -> 404") for level, msg in lines)
