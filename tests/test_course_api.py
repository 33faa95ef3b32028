from __future__ import annotations


def _create_course(client, title="Python Programming"):
    resp = client.post("/api/courses", json={"title": title})
    assert resp.status_code == 201
    return resp.json()


def _add_lesson(client, course_id, title, order):
    resp = client.post(f"/api/courses/{course_id}/lessons", json={"title": title, "order": order})
    assert resp.status_code == 201
    return resp.json()


def test_root_reports_ordering_policy(course_client):
    resp = course_client.get("/")

    assert resp.status_code == 200
    assert resp.json()["ordering_policy"] in {"shift", "reject"}
    assert "X-Process-Time" in resp.headers


def test_create_course_returns_draft(course_client):
    data = _create_course(course_client)

    assert data["title"] == "Python Programming"
    assert data["status"] == "Draft"
    assert data["isDeleted"] is False
    assert data["lessons"] == []
    assert "createdAt" in data and "updatedAt" in data


def test_create_course_with_blank_title_is_rejected(course_client):
    resp = course_client.post("/api/courses", json={"title": "  "})

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"] == "INVALID_ARGUMENT"
    assert "timestamp" in detail


def test_unknown_course_is_404(course_client):
    resp = course_client.get("/api/courses/does-not-exist")

    assert resp.status_code == 404
    assert resp.json()["detail"]["error"] == "NOT_FOUND"


def test_publish_requires_active_lesson(course_client):
    course = _create_course(course_client)

    resp = course_client.post(f"/api/courses/{course['id']}/publish")
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "PRECONDITION_FAILED"

    _add_lesson(course_client, course["id"], "Intro", 1)
    resp = course_client.post(f"/api/courses/{course['id']}/publish")
    assert resp.status_code == 200
    assert resp.json()["status"] == "Published"

    resp = course_client.post(f"/api/courses/{course['id']}/unpublish")
    assert resp.status_code == 200
    assert resp.json()["status"] == "Draft"


def test_add_lesson_shifts_existing_lessons(course_client):
    course = _create_course(course_client)
    for order, title in enumerate(["A", "B", "C"], start=1):
        _add_lesson(course_client, course["id"], title, order)

    lesson = _add_lesson(course_client, course["id"], "X", 1)
    assert lesson["courseId"] == course["id"]
    assert lesson["order"] == 1

    resp = course_client.get(f"/api/courses/{course['id']}")
    lessons = [(l["title"], l["order"]) for l in resp.json()["lessons"]]
    assert lessons == [("X", 1), ("A", 2), ("B", 3), ("C", 4)]


def test_add_lesson_with_invalid_order(course_client):
    course = _create_course(course_client)

    resp = course_client.post(f"/api/courses/{course['id']}/lessons", json={"title": "A", "order": 0})
    assert resp.status_code == 400

    resp = course_client.post(f"/api/courses/{course['id']}/lessons", json={"title": "A", "order": "first"})
    assert resp.status_code == 422


def test_reorder_lesson(course_client):
    course = _create_course(course_client)
    _add_lesson(course_client, course["id"], "A", 1)
    _add_lesson(course_client, course["id"], "B", 2)
    c = _add_lesson(course_client, course["id"], "C", 3)

    resp = course_client.put(
        f"/api/courses/{course['id']}/lessons/{c['id']}/order",
        json={"newOrder": 1},
    )

    assert resp.status_code == 200
    lessons = [(l["title"], l["order"]) for l in resp.json()["lessons"]]
    assert lessons == [("C", 1), ("A", 2), ("B", 3)]


def test_reorder_unknown_lesson_is_404(course_client):
    course = _create_course(course_client)

    resp = course_client.put(f"/api/courses/{course['id']}/lessons/nope/order", json={"newOrder": 1})

    assert resp.status_code == 404


def test_lesson_listing_get_and_delete(course_client):
    course = _create_course(course_client)
    a = _add_lesson(course_client, course["id"], "A", 1)
    _add_lesson(course_client, course["id"], "B", 2)
    _add_lesson(course_client, course["id"], "C", 3)

    resp = course_client.get(f"/api/courses/{course['id']}/lessons/{a['id']}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "A"

    resp = course_client.delete(f"/api/courses/{course['id']}/lessons/{a['id']}")
    assert resp.status_code == 204

    resp = course_client.get(f"/api/courses/{course['id']}/lessons/{a['id']}")
    assert resp.status_code == 404

    resp = course_client.get(f"/api/courses/{course['id']}/lessons", params={"page": 1, "pageSize": 1})
    assert resp.status_code == 200
    page = resp.json()
    assert page["total"] == 2
    assert page["totalPages"] == 2
    assert [l["title"] for l in page["items"]] == ["B"]

    resp = course_client.get(f"/api/courses/{course['id']}/lessons", params={"page": 0})
    assert resp.status_code == 400


def test_summary_and_delete_course(course_client):
    course = _create_course(course_client, "Data Science")
    _add_lesson(course_client, course["id"], "A", 1)

    resp = course_client.get(f"/api/courses/{course['id']}/summary")
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["totalLessons"] == 1
    assert summary["status"] == "Draft"
    assert "lastModified" in summary

    resp = course_client.delete(f"/api/courses/{course['id']}")
    assert resp.status_code == 204
    assert course_client.get(f"/api/courses/{course['id']}").status_code == 404


def test_list_courses_with_search(course_client):
    _create_course(course_client, "Python Programming")
    _create_course(course_client, "Web Development")

    resp = course_client.get("/api/courses", params={"q": "web"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert data["items"][0]["title"] == "Web Development"

    resp = course_client.get("/api/courses", params={"status": "Published"})
    assert resp.json()["total"] == 0


def test_list_courses_status_is_case_insensitive(course_client):
    course = _create_course(course_client, "Live")
    _add_lesson(course_client, course["id"], "Intro", 1)
    course_client.post(f"/api/courses/{course['id']}/publish")
    _create_course(course_client, "Still drafting")

    resp = course_client.get("/api/courses", params={"status": "published"})
    assert resp.status_code == 200
    assert [c["title"] for c in resp.json()["items"]] == ["Live"]

    resp = course_client.get("/api/courses", params={"status": "bogus"})
    assert resp.status_code == 200
    assert resp.json()["total"] == 2


def test_run_serves_app_with_uvicorn(monkeypatch):
    import course_service.main as course_main
    import gateway.main as gateway_main

    calls = []
    monkeypatch.setattr(course_main.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))

    course_main.run()
    gateway_main.run()

    assert calls[0] == (course_main.app, {"host": "0.0.0.0", "port": 8002})
    assert calls[1] == (gateway_main.app, {"host": "0.0.0.0", "port": 8000})
