import pytest
import storage
from fastapi.testclient import TestClient
from main import app


SETUP = {
    "name": "Midterm",
    "total_marks": 20,
    "course_outcomes": [
        {"code": "CO1", "description": "Understand recursion"},
        {"code": "CO2", "description": "Analyse complexity"},
    ],
    "questions": [
        {"number": "1", "statement": "Write a recursive sum", "co_code": "CO1", "max_marks": 10},
        {"number": "2", "statement": "Big-O of merge sort", "co_code": "CO2", "max_marks": 10},
    ],
}


@pytest.fixture(autouse=True)
def tmp_data_dir(tmp_path, monkeypatch):
    """Redirect all storage reads/writes to a temporary directory."""
    monkeypatch.setattr(storage, 'DATA_DIR', str(tmp_path))
    return tmp_path


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def exam_id(client):
    resp = client.post("/api/exams", json=SETUP)
    assert resp.status_code == 201
    return resp.json()["id"]
