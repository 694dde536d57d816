import json

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import crud
from conftest import auth_headers, create_test_company, create_test_job, create_test_user


def _job_form(**overrides) -> dict:
    body = {
        "title": "Data Engineer",
        "department": "Platform",
        "location": "Pune",
        "employmentType": "full-time",
        "experience": "mid",
        "salaryMin": "",
        "salaryMax": 2400000,
        "description": "Own the pipelines.",
        "skills": ["spark", "airflow"],
        "remote": True,
    }
    body.update(overrides)
    return body


def test_create_job_for_own_company(test_client: TestClient, db_session: Session):
    # 1. Arrange
    owner = create_test_user(db_session)
    company = create_test_company(db_session, owner)

    # 2. Act
    response = test_client.post("/api/jobs", json=_job_form(), headers=auth_headers(owner))

    # 3. Assert
    assert response.status_code == status.HTTP_201_CREATED
    payload = response.json()
    assert payload["message"] == "Job posted successfully"
    data = payload["data"]
    assert data["company_id"] == company.id
    assert data["employment_type"] == "full-time"
    assert data["experience_level"] == "mid"
    assert data["salary_min"] is None
    assert data["salary_max"] == 2400000
    assert data["skills"] == ["spark", "airflow"]
    assert data["is_remote"] is True
    assert data["is_urgent"] is False
    assert data["status"] == "pending"
    assert data["applicants_count"] == 0


def test_create_job_without_company(test_client: TestClient, db_session: Session):
    user = create_test_user(db_session)

    response = test_client.post("/api/jobs", json=_job_form(), headers=auth_headers(user))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == (
        "Company profile not found. Please complete your company profile first."
    )


def test_create_job_missing_required_field(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    create_test_company(db_session, owner)
    body = _job_form()
    del body["title"]

    response = test_client.post("/api/jobs", json=body, headers=auth_headers(owner))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Validation failed"


def test_list_jobs_only_returns_own_company_newest_first(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    company = create_test_company(db_session, owner)
    first = create_test_job(db_session, company, title="First")
    second = create_test_job(db_session, company, title="Second")
    other_owner = create_test_user(db_session)
    create_test_job(db_session, create_test_company(db_session, other_owner), title="Elsewhere")

    response = test_client.get("/api/jobs", headers=auth_headers(owner))

    assert response.status_code == status.HTTP_200_OK
    assert [j["id"] for j in response.json()["data"]] == [second.id, first.id]


def test_recent_jobs_respects_limit(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    company = create_test_company(db_session, owner)
    for i in range(3):
        create_test_job(db_session, company, title=f"Role {i}")

    response = test_client.get("/api/jobs/recent", params={"limit": 2}, headers=auth_headers(owner))
    too_many = test_client.get("/api/jobs/recent", params={"limit": 500}, headers=auth_headers(owner))

    assert response.status_code == status.HTTP_200_OK
    assert len(response.json()["data"]) == 2
    assert too_many.status_code == status.HTTP_400_BAD_REQUEST


def test_get_job_of_another_company_is_forbidden(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))
    intruder = create_test_user(db_session)
    create_test_company(db_session, intruder)

    response = test_client.get(f"/api/jobs/{job.id}", headers=auth_headers(intruder))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["message"] == "Access denied"


def test_get_missing_job(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    create_test_company(db_session, owner)

    response = test_client.get("/api/jobs/987654", headers=auth_headers(owner))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Job not found"


def test_update_job_partial(test_client: TestClient, db_session: Session):
    # 1. Arrange
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner), department="Core")

    # 2. Act
    response = test_client.put(
        f"/api/jobs/{job.id}",
        json={"title": "Senior Backend Engineer", "urgent": True, "applicants_count": 50},
        headers=auth_headers(owner),
    )

    # 3. Assert
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["title"] == "Senior Backend Engineer"
    assert data["is_urgent"] is True
    assert data["department"] == "Core"
    assert data["applicants_count"] == 0


def test_update_job_with_empty_body_returns_unchanged_job(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.put(f"/api/jobs/{job.id}", json={}, headers=auth_headers(owner))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["id"] == job.id
    assert data["title"] == job.title


def test_update_job_malformed_skills_stored_raw(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.put(
        f"/api/jobs/{job.id}", json={"skills": "python, sql"}, headers=auth_headers(owner)
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["skills"] == "python, sql"


def test_update_job_explicit_null_title_rejected(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.put(f"/api/jobs/{job.id}", json={"title": None}, headers=auth_headers(owner))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    db_session.expire_all()
    assert crud.get_job(db_session, job.id).title == job.title


def test_update_job_status(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.put(
        f"/api/jobs/{job.id}/status", json={"status": "active"}, headers=auth_headers(owner)
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["status"] == "active"


def test_update_job_status_rejects_unknown_status(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.put(
        f"/api/jobs/{job.id}/status", json={"status": "archived"}, headers=auth_headers(owner)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Invalid status. Valid statuses are: pending, active, closed"
    db_session.expire_all()
    assert crud.get_job(db_session, job.id).status == "pending"


def test_delete_job(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.delete(f"/api/jobs/{job.id}", headers=auth_headers(owner))
    again = test_client.delete(f"/api/jobs/{job.id}", headers=auth_headers(owner))

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "message": "Job deleted successfully", "data": None}
    assert again.status_code == status.HTTP_404_NOT_FOUND


def test_apply_is_public_and_counts_every_call(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    test_client.post(f"/api/jobs/{job.id}/apply")
    response = test_client.post(f"/api/jobs/{job.id}/apply")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["applicants_count"] == 2


def test_apply_to_missing_job(test_client: TestClient):
    response = test_client.post("/api/jobs/987654/apply")

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_job_skills_stored_as_json_text(db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner), skills=["go"])

    assert json.loads(job.skills) == ["go"]


def test_create_job_rejects_out_of_range_salary(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    company = create_test_company(db_session, owner)

    too_big = test_client.post("/api/jobs", json=_job_form(salaryMin=10**20), headers=auth_headers(owner))
    negative = test_client.post("/api/jobs", json=_job_form(salaryMax=-1), headers=auth_headers(owner))

    assert too_big.status_code == status.HTTP_400_BAD_REQUEST
    assert too_big.json()["message"] == "Validation failed"
    assert negative.status_code == status.HTTP_400_BAD_REQUEST
    assert crud.get_jobs_by_company_id(db_session, company.id) == []


def test_update_job_rejects_out_of_range_salary(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    job = create_test_job(db_session, create_test_company(db_session, owner))

    response = test_client.put(
        f"/api/jobs/{job.id}", json={"salaryMax": 2**31}, headers=auth_headers(owner)
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_job_with_null_skills_stores_empty_list(test_client: TestClient, db_session: Session):
    owner = create_test_user(db_session)
    create_test_company(db_session, owner)

    response = test_client.post("/api/jobs", json=_job_form(skills=None), headers=auth_headers(owner))

    assert response.status_code == status.HTTP_201_CREATED
    job_id = response.json()["data"]["id"]
    assert response.json()["data"]["skills"] == []
    assert json.loads(crud.get_job(db_session, job_id).skills) == []
