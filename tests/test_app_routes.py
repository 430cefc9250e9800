import logging

import pytest

import app_services as svc
from core.ranking import VideoRanker
from models import Course, Resource
from spider.youtube_api import CatalogError

from conftest import NOW, FakeCatalog


@pytest.fixture
def catalog(monkeypatch, sample_videos):
    fake = FakeCatalog(sample_videos)
    monkeypatch.setattr(svc, "build_catalog", lambda: fake)
    monkeypatch.setattr("core.course_builder.VideoRanker", lambda: VideoRanker(now=NOW))
    return fake


def _create(client, name="React"):
    return client.post("/api/courses", json={"name": name})


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "healthy"}


def test_register_rejects_duplicates(client):
    assert client.post("/register", json={"account": "a", "password": "p"}).status_code == 201
    resp = client.post("/register", json={"account": "a", "password": "p"})
    assert resp.status_code == 409


def test_login_with_wrong_password(client):
    client.post("/register", json={"account": "a", "password": "p"})
    resp = client.post("/login", json={"account": "a", "password": "nope"})
    assert resp.status_code == 401


def test_courses_require_login(client):
    resp = client.get("/api/courses")
    assert resp.status_code == 401
    assert resp.get_json()["code"] == 401


def test_create_course_generates_both_levels(auth_client, catalog):
    resp = _create(auth_client)
    assert resp.status_code == 201

    data = resp.get_json()
    course = data["course"]
    assert course["name"] == "React"
    assert course["images"] == []
    assert len(course["resources"]["1"]) == 3
    assert len(course["resources"]["2"]) == 3
    assert {r["status"] for r in course["resources"]["1"]} == {"not started"}

    assert set(data["ranking"]) == {"beginner", "advanced"}
    scores = [v["final_score"] for v in data["ranking"]["beginner"]]
    assert scores == sorted(scores, reverse=True)
    assert {q for q, _ in catalog.search_calls} == {"beginner React tutorial", "advanced React tutorial"}


def test_create_course_requires_name(auth_client, catalog):
    assert _create(auth_client, "  ").status_code == 400
    assert catalog.search_calls == []


def test_catalog_failure_is_reported_and_nothing_saved(auth_client, monkeypatch):
    monkeypatch.setattr(svc, "build_catalog", lambda: FakeCatalog(error=CatalogError("quota")))
    resp = _create(auth_client)

    assert resp.status_code == 502
    assert Course.query.count() == 0
    assert Resource.query.count() == 0


def test_list_and_get_course(auth_client, catalog):
    course_id = _create(auth_client).get_json()["course"]["id"]

    listed = auth_client.get("/api/courses").get_json()["courses"]
    assert [c["id"] for c in listed] == [course_id]

    detail = auth_client.get(f"/api/courses/{course_id}?with_progress=1").get_json()["course"]
    assert detail["progress"] == {"1": 0.0, "2": 0.0}
    assert auth_client.get("/api/courses/999").status_code == 404


def test_progress_follows_resource_status(auth_client, catalog):
    course = _create(auth_client).get_json()["course"]
    beginner = course["resources"]["1"]

    auth_client.patch(f"/api/resources/{beginner[0]['id']}", json={"status": "completed"})
    auth_client.patch(f"/api/resources/{beginner[1]['id']}", json={"status": "in progress"})

    progress = auth_client.get(f"/api/courses/{course['id']}/progress").get_json()
    assert progress["1"] == pytest.approx((1 + 0.5) / 3 * 100)
    assert progress["2"] == 0.0


def test_update_resource_validation_and_feedback(auth_client, catalog):
    resource_id = _create(auth_client).get_json()["course"]["resources"]["1"][0]["id"]
    url = f"/api/resources/{resource_id}"

    assert auth_client.patch(url, json={"status": "done"}).status_code == 400
    assert auth_client.patch(url, json={"feedback": 5}).status_code == 400
    assert auth_client.patch(url, json={}).status_code == 400

    auth_client.patch(url, json={"feedback": 1})
    resp = auth_client.patch(url, json={"feedback": 1})
    assert resp.get_json()["resource"]["feedback"] == 2
    resp = auth_client.patch(url, json={"feedback": -1})
    assert resp.get_json()["resource"]["feedback"] == 1


def test_delete_selected_resources(auth_client, catalog):
    course = _create(auth_client).get_json()["course"]
    ids = [r["id"] for r in course["resources"]["1"][:2]]

    resp = auth_client.post(f"/api/courses/{course['id']}/resources/delete", json={"ids": ids})
    assert resp.get_json()["deleted"] == 2

    detail = auth_client.get(f"/api/courses/{course['id']}").get_json()["course"]
    assert len(detail["resources"]["1"]) == 1
    assert len(detail["resources"]["2"]) == 3


def test_delete_course(auth_client, catalog):
    course_id = _create(auth_client).get_json()["course"]["id"]
    assert auth_client.delete(f"/api/courses/{course_id}").status_code == 200
    assert Course.query.count() == 0
    assert Resource.query.count() == 0


def test_copy_course_with_code(client, catalog):
    client.post("/register", json={"account": "owner", "password": "p"})
    client.post("/login", json={"account": "owner", "password": "p"})
    course_id = _create(client).get_json()["course"]["id"]
    client.post("/logout")

    client.post("/register", json={"account": "friend", "password": "p"})
    client.post("/login", json={"account": "friend", "password": "p"})
    resp = client.post(f"/api/courses/{course_id}/copy")

    assert resp.status_code == 201
    copied = resp.get_json()["course"]
    assert copied["id"] != course_id
    assert len(copied["resources"]["1"]) == 3
    assert client.post("/api/courses/999/copy").status_code == 404
    assert client.get(f"/api/courses/{course_id}").status_code == 404


def test_create_app_configures_logging(app):
    assert logging.getLogger("urllib3.connectionpool").level == logging.WARNING
