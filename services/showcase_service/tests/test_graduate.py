import json
from datetime import datetime

from models import Interaction, InteractionType, Message, ProjectStatus, UserType


def test_dashboard_totals(client, graduate, make_project, auth_headers):
    make_project(graduate, title="One", views=5, likes=1)
    make_project(graduate, title="Two", views=7, likes=2, status=ProjectStatus.DRAFT)

    response = client.get("/api/graduate/dashboard", headers=auth_headers(graduate))

    assert response.status_code == 200
    data = response.json()
    assert data["totalProjects"] == 2
    assert data["totalViews"] == 12
    assert data["totalLikes"] == 3
    assert len(data["recentProjects"]) == 2


def test_dashboard_requires_graduate_role(client, investor, auth_headers):
    assert client.get("/api/graduate/dashboard", headers=auth_headers(investor)).status_code == 403


def test_own_projects_include_every_status(client, graduate, make_user, make_project, auth_headers):
    make_project(graduate, title="Draft", status=ProjectStatus.DRAFT, images=json.dumps(["bad", "https://drive.google.com/x"]))
    make_project(graduate, title="Rejected", status=ProjectStatus.REJECTED)
    make_project(make_user(UserType.GRADUATE), title="Someone else")

    response = client.get("/api/graduate/projects", headers=auth_headers(graduate))

    titles = {p["title"]: p for p in response.json()}
    assert set(titles) == {"Draft", "Rejected"}
    assert titles["Draft"]["images"] == ["https://drive.google.com/x"]


def test_project_analytics(client, db, graduate, investor, make_project, auth_headers):
    project = make_project(graduate, views=40, likes=4)
    db.add(Interaction(investor_id=investor.id, project_id=project.id, type=InteractionType.BOOKMARK))
    db.add(Interaction(investor_id=investor.id, project_id=project.id, type=InteractionType.INTEREST))
    db.commit()

    response = client.get(f"/api/graduate/analytics/{project.id}", headers=auth_headers(graduate))

    assert response.status_code == 200
    data = response.json()
    assert data["projectId"] == project.id
    assert data["views"] == 40
    assert data["bookmarks"] == 1
    assert data["interests"] == 1


def test_project_analytics_for_foreign_project(client, graduate, make_user, make_project, auth_headers):
    project = make_project(make_user(UserType.GRADUATE))
    response = client.get(f"/api/graduate/analytics/{project.id}", headers=auth_headers(graduate))
    assert response.status_code == 404


def test_received_messages_newest_first(client, db, graduate, investor, auth_headers):
    db.add(Message(sender_id=investor.id, recipient_id=graduate.id, content="older", created_at=datetime(2024, 1, 1)))
    db.add(Message(sender_id=investor.id, recipient_id=graduate.id, content="newer", created_at=datetime(2024, 1, 2)))
    db.add(Message(sender_id=graduate.id, recipient_id=investor.id, content="sent", created_at=datetime(2024, 1, 3)))
    db.commit()

    response = client.get("/api/graduate/messages", headers=auth_headers(graduate))

    assert response.status_code == 200
    messages = response.json()
    assert [m["content"] for m in messages] == ["newer", "older"]
    assert messages[0]["sender"]["companyName"] == "Seed Fund"
