from datetime import datetime

from models import Interaction, InteractionType, UserType


def test_dashboard_requires_investor_role(client, graduate, auth_headers):
    response = client.get("/api/investor/dashboard", headers=auth_headers(graduate))
    assert response.status_code == 403


def test_bookmark_and_dashboard(client, graduate, investor, make_project, auth_headers):
    project = make_project(graduate, title="Bookmarked")
    headers = auth_headers(investor)

    created = client.post(f"/api/investor/bookmark/{project.id}", headers=headers)
    again = client.post(f"/api/investor/bookmark/{project.id}", headers=headers)
    dashboard = client.get("/api/investor/dashboard", headers=headers)

    assert created.status_code == 201
    assert again.status_code == 201
    data = dashboard.json()
    assert data["totalBookmarks"] == 1
    assert data["totalInterests"] == 0
    assert data["recentBookmarks"][0]["project"]["title"] == "Bookmarked"


def test_bookmark_missing_project(client, investor, auth_headers):
    response = client.post("/api/investor/bookmark/999", headers=auth_headers(investor))
    assert response.status_code == 404


def test_list_and_remove_bookmarks(client, graduate, investor, make_project, auth_headers):
    project = make_project(graduate)
    headers = auth_headers(investor)
    client.post(f"/api/investor/bookmark/{project.id}", headers=headers)

    bookmarks = client.get("/api/investor/bookmarks", headers=headers).json()
    assert [b["projectId"] for b in bookmarks] == [project.id]
    assert bookmarks[0]["type"] == "bookmark"

    assert client.delete(f"/api/investor/bookmark/{project.id}", headers=headers).status_code == 200
    assert client.delete(f"/api/investor/bookmark/{project.id}", headers=headers).status_code == 404
    assert client.get("/api/investor/bookmarks", headers=headers).json() == []


def test_express_interest_only_once(client, graduate, investor, make_project, auth_headers):
    project = make_project(graduate)
    headers = auth_headers(investor)
    payload = {"projectId": project.id, "message": "Keen to talk"}

    first = client.post("/api/investor/express-interest", json=payload, headers=headers)
    second = client.post("/api/investor/express-interest", json=payload, headers=headers)

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["detail"] == "Interest already expressed for this project"


def test_contact_graduate_requires_message(client, graduate, investor, make_project, auth_headers):
    project = make_project(graduate)
    response = client.post(
        "/api/investor/contact-graduate",
        json={"projectId": project.id, "message": ""},
        headers=auth_headers(investor),
    )
    assert response.status_code == 422


def test_conversations_grouped_by_project_and_graduate(client, db, make_user, investor, make_project, auth_headers):
    grad_a = make_user(UserType.GRADUATE, first_name="Alice")
    grad_b = make_user(UserType.GRADUATE, first_name="Bob")
    project_a = make_project(grad_a, title="A")
    project_b = make_project(grad_b, title="B")

    rows = [
        (project_a, InteractionType.CONTACT, "first", datetime(2024, 1, 1)),
        (project_b, InteractionType.INTEREST, "second", datetime(2024, 1, 2)),
        (project_a, InteractionType.INTEREST, "third", datetime(2024, 1, 3)),
        (project_a, InteractionType.BOOKMARK, None, datetime(2024, 1, 4)),
    ]
    for project, kind, message, created_at in rows:
        db.add(Interaction(
            investor_id=investor.id, project_id=project.id, type=kind, message=message, created_at=created_at
        ))
    db.commit()

    response = client.get("/api/investor/conversations", headers=auth_headers(investor))

    assert response.status_code == 200
    conversations = response.json()
    assert [c["id"] for c in conversations] == [f"{project_a.id}-{grad_a.id}", f"{project_b.id}-{grad_b.id}"]
    assert [m["message"] for m in conversations[0]["messages"]] == ["third", "first"]
    assert [m["type"] for m in conversations[0]["messages"]] == ["interest", "contact"]
    assert conversations[0]["project"]["title"] == "A"
    assert conversations[0]["graduate"]["firstName"] == "Alice"
    assert [m["message"] for m in conversations[1]["messages"]] == ["second"]


def test_conversations_empty(client, investor, auth_headers):
    response = client.get("/api/investor/conversations", headers=auth_headers(investor))
    assert response.status_code == 200
    assert response.json() == []
