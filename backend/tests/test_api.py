import pytest
from fastapi.testclient import TestClient

from api import dependencies
from main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_stores():
    dependencies.reset()
    yield
    dependencies.reset()


@pytest.fixture
def job(family, template, variant, company):
    return {
        "family": family.model_dump(mode="json"),
        "template": template.model_dump(mode="json"),
        "variant": variant.model_dump(mode="json"),
        "company": company.model_dump(mode="json"),
    }


def _create(candidate_id="cand-1", variant_id="var-techstart-frontend"):
    return client.post("/applications", json={
        "candidate_id": candidate_id,
        "company_job_variant_id": variant_id,
        "changed_by": "recruiter-1",
    })


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_resolve(job):
    response = client.post("/jobs/resolve", json=job)
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Frontend Engineer"
    assert [r["description"] for r in data["requirements"]] == ["JavaScript", "React", "TailwindCSS"]
    assert data["requirements"][1]["weight"] == 10


def test_resolve_inconsistent_graph(job):
    job["template"]["job_family_id"] = "fam-other"
    response = client.post("/jobs/resolve", json=job)
    assert response.status_code == 400
    assert response.json()["error_type"] == "ValidationError"


def test_resolve_rejects_bad_weight(job):
    job["variant"]["additional_requirements"][0]["weight"] = 12
    response = client.post("/jobs/resolve", json=job)
    assert response.status_code == 422


def test_score_from_job_graph(job, resume):
    response = client.post("/match/score", json={"resume": resume.model_dump(mode="json"), "job": job})
    assert response.status_code == 200
    data = response.json()
    assert data["overall_score"] == pytest.approx(80.0)
    assert data["gaps"] == ["Nice-to-have gap: TailwindCSS"]
    assert len(data["detailed_analysis"]) == 3


def test_score_requires_job():
    response = client.post("/match/score", json={"resume": {}})
    assert response.status_code == 422


def test_application_lifecycle():
    created = _create()
    assert created.status_code == 201
    application_id = created.json()["id"]
    assert created.json()["status"] == "applied"

    allowed = client.get(f"/applications/{application_id}/transitions").json()
    assert allowed["allowed"] == ["screening", "rejected"]

    moved = client.post(f"/applications/{application_id}/transitions", json={
        "to_stage": "screening", "changed_by": "recruiter-1",
    })
    assert moved.status_code == 200
    assert moved.json()["status"] == "screening"

    history = client.get(f"/applications/{application_id}/history").json()
    assert [(h["from_stage"], h["to_stage"]) for h in history] == [(None, "applied"), ("applied", "screening")]

    stats = client.get("/stages/screening/stats").json()
    assert stats["total_transitions"] == 1
    assert stats["manual_transitions"] == 1


def test_duplicate_application():
    _create()
    response = _create()
    assert response.status_code == 409
    assert response.json()["error_type"] == "ConflictError"


def test_illegal_transition():
    application_id = _create().json()["id"]
    response = client.post(f"/applications/{application_id}/transitions", json={
        "to_stage": "hired", "changed_by": "recruiter-1",
    })
    assert response.status_code == 400


def test_stale_transition_is_retryable():
    application_id = _create().json()["id"]
    response = client.post(f"/applications/{application_id}/transitions", json={
        "to_stage": "screening", "changed_by": "recruiter-1", "expected_status": "shortlisted",
    })
    assert response.status_code == 409
    body = response.json()
    assert body["error_type"] == "StaleStateError"
    assert body["retryable"] is True


def test_finalized_application():
    application_id = _create().json()["id"]
    client.post(f"/applications/{application_id}/transitions", json={"to_stage": "rejected", "changed_by": "recruiter-1"})
    response = client.post(f"/applications/{application_id}/transitions", json={"to_stage": "hired", "automated": True})
    assert response.status_code == 409
    assert "finalized" in response.json()["detail"]


def test_unknown_application():
    response = client.get("/applications/nope")
    assert response.status_code == 404
    assert response.json()["error_type"] == "NotFoundError"


def test_match_application(job, resume):
    application_id = _create().json()["id"]
    response = client.post(
        f"/applications/{application_id}/match",
        json={"resume": resume.model_dump(mode="json"), "job": job},
    )
    assert response.status_code == 200
    application = client.get(f"/applications/{application_id}").json()
    assert application["fit_score"] == response.json()["overall_score"]
    assert application["match_explanation"]["gaps"] == ["Nice-to-have gap: TailwindCSS"]


def test_publish_versions(job):
    for expected in (1, 2):
        response = client.post("/variants/var-techstart-frontend/publish", json={"job": job, "created_by": "hr-1"})
        assert response.status_code == 201
        data = response.json()
        assert data["jd_version"]["version"] == expected
        assert data["variant"]["is_active"] is True
        assert data["jd_version"]["published_content"].startswith("# Frontend Engineer")

    versions = client.get("/variants/var-techstart-frontend/versions").json()
    assert [v["version"] for v in versions] == [2, 1]
    latest = client.get("/variants/var-techstart-frontend/versions/latest").json()
    assert latest["version"] == 2


def test_publish_path_mismatch(job):
    response = client.post("/variants/other/publish", json={"job": job, "created_by": "hr-1"})
    assert response.status_code == 400


def test_latest_without_versions():
    response = client.get("/variants/var-none/versions/latest")
    assert response.status_code == 404
