import pytest
from fastapi.testclient import TestClient

from api.dependencies import (
    get_appropriateness_filter,
    get_embedder,
    get_store,
    get_vector_index,
)
from main import app
from services.pipeline.appropriateness import KeepAllFilter
from services.store import InMemoryStore

client = TestClient(app)

JOB = {
    "title": "Full Stack Developer",
    "company": "Acme",
    "location": "Berlin",
    "experience_level": "Mid-Level",
    "skills": ["react", "typescript", "node.js"],
    "salary_min": 60000,
    "salary_max": 80000,
}

RESUME = {
    "file_name": "jane.pdf",
    "original_text": "Jane Doe. Frontend developer with React and Node.js experience.",
    "parsed_data": {
        "skills": ["react", "node.js", "aws"],
        "primary_role": "Frontend Developer",
        "industries": ["Technology"],
        "experience_level": "Mid",
        "years_of_experience": 4,
    },
}


@pytest.fixture(autouse=True)
def store(fake_embedder):
    store = InMemoryStore()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_vector_index] = lambda: None
    app.dependency_overrides[get_appropriateness_filter] = KeepAllFilter
    app.dependency_overrides[get_embedder] = lambda: fake_embedder
    yield store
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "vector_search_enabled" in data


def test_create_and_get_job():
    response = client.post("/jobs", json=JOB)
    assert response.status_code == 201
    job = response.json()
    assert job["id"] == 1
    assert job["experience_level"] == "Mid-Level"
    assert "vector" not in job

    response = client.get("/jobs/1")
    assert response.status_code == 200
    assert response.json()["title"] == "Full Stack Developer"


def test_get_missing_job():
    assert client.get("/jobs/404").status_code == 404


def test_create_job_rejects_inverted_salary():
    response = client.post("/jobs", json={**JOB, "salary_min": 90000, "salary_max": 10000})
    assert response.status_code == 400


def test_create_job_requires_title():
    response = client.post("/jobs", json={**JOB, "title": ""})
    assert response.status_code == 422


def test_search_jobs():
    client.post("/jobs", json=JOB)
    client.post("/jobs", json={**JOB, "title": "Sales Lead", "skills": ["crm"], "work_type": "Contract"})

    response = client.get("/jobs", params={"q": "react"})
    assert [j["title"] for j in response.json()] == ["Full Stack Developer"]

    response = client.get("/jobs", params={"work_type": "contract"})
    assert [j["title"] for j in response.json()] == ["Sales Lead"]


def test_create_and_get_resume():
    response = client.post("/resumes", json=RESUME)
    assert response.status_code == 201
    resume = response.json()
    assert resume["parsed_data"]["experience_level"] == "Mid-Level"
    assert resume["uploaded_at"]

    assert client.get(f"/resumes/{resume['id']}").status_code == 200
    assert client.get("/resumes/999").status_code == 404


def test_find_matches():
    client.post("/jobs", json=JOB)
    client.post("/jobs", json={
        **JOB, "title": "CRM Director", "skills": ["salesforce", "crm"], "experience_level": "Leadership",
    })
    resume_id = client.post("/resumes", json=RESUME).json()["id"]

    response = client.post(f"/resumes/{resume_id}/matches", params={"limit": 5})
    assert response.status_code == 200
    data = response.json()
    assert data["scoring_method"] == "local_corpus"
    assert data["degraded"] is False
    assert [m["job"]["title"] for m in data["matches"]] == ["Full Stack Developer", "CRM Director"]
    assert data["matches"][0]["match_score"] == 0.77
    assert data["matches"][0]["confidence"] == "Medium"
    assert data["matches"][0]["matching_skills"] == ["react", "node.js"]
    assert data["stats"]["matches_found"] == 2

    history = client.get(f"/resumes/{resume_id}/matches").json()
    assert [h["job_id"] for h in history] == [1, 2]


def test_find_matches_unknown_resume():
    assert client.post("/resumes/999/matches").status_code == 404


def test_find_matches_without_profile():
    resume_id = client.post("/resumes", json={"file_name": "raw.pdf", "original_text": "text"}).json()["id"]
    response = client.post(f"/resumes/{resume_id}/matches")
    assert response.status_code == 400


@pytest.mark.parametrize("limit", [0, 21])
def test_find_matches_limit_bounds(limit):
    resume_id = client.post("/resumes", json=RESUME).json()["id"]
    response = client.post(f"/resumes/{resume_id}/matches", params={"limit": limit})
    assert response.status_code == 422


def test_vectorize_jobs():
    client.post("/jobs", json=JOB)
    client.post("/jobs", json={**JOB, "title": "Backend Developer"})

    response = client.post("/jobs/vectorize", json={"job_ids": [2]})
    assert response.status_code == 200
    assert response.json() == {"processed": 1, "failed_job_ids": [], "upserted": 0}


def test_index_stats_disabled():
    response = client.get("/vector-index/stats")
    assert response.status_code == 200
    assert response.json()["enabled"] is False


def test_index_stats_and_delete(fake_index):
    app.dependency_overrides[get_vector_index] = lambda: fake_index
    client.post("/jobs", json=JOB)
    client.post("/jobs/vectorize", json={})

    stats = client.get("/vector-index/stats").json()
    assert stats == {"enabled": True, "count": 1, "dimension": 9}

    assert client.delete("/vector-index").status_code == 200
    assert client.get("/vector-index/stats").json()["count"] == 0


def test_index_outage_returns_503(fake_index):
    fake_index.fail = True
    app.dependency_overrides[get_vector_index] = lambda: fake_index
    assert client.get("/vector-index/stats").status_code == 503


def test_delete_index_disabled():
    assert client.delete("/vector-index").status_code == 404
