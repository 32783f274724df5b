import json
from datetime import datetime

from crud import build_project_filters
from models import Project, ProjectStatus, UserType

DRIVE_IMAGE = "https://drive.google.com/file/d/img1/view"
DRIVE_DOC = "https://drive.google.com/file/d/doc1/view"
YOUTUBE = "https://youtu.be/abc"


# ------- listing -------
def test_list_only_returns_published_projects(client, graduate, make_project):
    make_project(graduate, title="Live")
    make_project(graduate, title="Draft", status=ProjectStatus.DRAFT)
    make_project(graduate, title="Waiting", status=ProjectStatus.UNDER_REVIEW)

    response = client.get("/api/projects")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert [p["title"] for p in data["projects"]] == ["Live"]


def test_list_includes_legacy_active_status(client, graduate, make_project):
    make_project(graduate, title="Old row", status="active")

    data = client.get("/api/projects").json()

    assert data["total"] == 1
    assert data["projects"][0]["status"] == "published"


def test_list_filters_by_category(client, graduate, make_project):
    make_project(graduate, title="Farm", category="agriculture")
    make_project(graduate, title="Clinic", category="health")
    make_project(graduate, title="Hidden farm", category="agriculture", status=ProjectStatus.DRAFT)

    data = client.get("/api/projects", params={"category": "agriculture"}).json()

    assert [p["title"] for p in data["projects"]] == ["Farm"]
    assert all(p["category"] == "agriculture" and p["status"] == "published" for p in data["projects"])


def test_list_search_matches_title_or_description(client, graduate, make_project):
    make_project(graduate, title="Clean water", description="Filters")
    make_project(graduate, title="Irrigation", description="Saves water on farms")
    make_project(graduate, title="Solar", description="Panels")

    data = client.get("/api/projects", params={"search": "water"}).json()

    assert sorted(p["title"] for p in data["projects"]) == ["Clean water", "Irrigation"]


def test_list_filters_by_graduate(client, make_user, make_project):
    first = make_user(UserType.GRADUATE)
    second = make_user(UserType.GRADUATE)
    make_project(first, title="Mine")
    make_project(second, title="Theirs")

    data = client.get("/api/projects", params={"graduateId": second.id}).json()

    assert [p["title"] for p in data["projects"]] == ["Theirs"]
    assert data["projects"][0]["graduate"]["id"] == second.id


def test_list_orders_newest_first(client, graduate, make_project):
    make_project(graduate, title="Older", created_at=datetime(2024, 1, 1))
    make_project(graduate, title="Newer", created_at=datetime(2024, 6, 1))

    data = client.get("/api/projects").json()

    assert [p["title"] for p in data["projects"]] == ["Newer", "Older"]


def test_search_term_is_bound_not_interpolated(client, graduate, make_project):
    make_project(graduate, title="Clean water")
    term = "x' OR '1'='1"

    where, params = build_project_filters(category="a'b", search=term)
    assert term not in where
    assert "a'b" not in where
    assert params["pattern"] == f"%{term}%"
    assert params["category"] == "a'b"

    response = client.get("/api/projects", params={"search": term})
    assert response.status_code == 200
    assert response.json()["total"] == 0


def test_list_renormalizes_stored_media(client, graduate, make_project):
    make_project(
        graduate,
        images=json.dumps([DRIVE_IMAGE, "https://evil.example/x.png", ""]),
        videos="[oops",
        documents=None,
    )

    project = client.get("/api/projects").json()["projects"][0]

    assert project["images"] == [DRIVE_IMAGE]
    assert project["videos"] == []
    assert project["documents"] == []


def test_featured_projects(client, graduate, make_project):
    make_project(graduate, title="Star", featured=True)
    make_project(graduate, title="Plain")
    make_project(graduate, title="Unpublished star", featured=True, status=ProjectStatus.DRAFT)

    data = client.get("/api/projects/featured").json()

    assert [p["title"] for p in data["projects"]] == ["Star"]


# ------- single fetch / views -------
def test_get_project_increments_views_each_time(client, graduate, make_project):
    project = make_project(graduate, views=10)

    first = client.get(f"/api/projects/{project.id}")
    second = client.get(f"/api/projects/{project.id}")

    assert first.status_code == 200
    assert first.json()["project"]["views"] == 11
    assert second.json()["project"]["views"] == 12


def test_status_lookup_ignores_case():
    assert ProjectStatus("Published") is ProjectStatus.PUBLISHED
    assert ProjectStatus("UNDER_REVIEW") is ProjectStatus.UNDER_REVIEW
    assert ProjectStatus("Pending") is ProjectStatus.UNDER_REVIEW


def test_mixed_case_stored_status_reads_back(client, graduate, make_project):
    project = make_project(graduate, status="Published")

    response = client.get(f"/api/projects/{project.id}")

    assert response.status_code == 200
    assert response.json()["project"]["status"] == "published"


def test_get_missing_project(client):
    response = client.get("/api/projects/999")
    assert response.status_code == 404


def test_record_view_endpoint(client, graduate, make_project):
    project = make_project(graduate, views=3)

    response = client.post(f"/api/projects/{project.id}/view")

    assert response.status_code == 200
    assert response.json()["views"] == 4


# ------- create -------
def test_create_project_filters_media_silently(client, db, graduate, auth_headers):
    response = client.post(
        "/api/projects",
        json={
            "title": "Water kiosk",
            "description": "Community water",
            "category": "water",
            "imageUrls": [DRIVE_IMAGE, "not-a-link", ""],
            "videoUrls": json.dumps([YOUTUBE, "https://vimeo.com/1"]),
            "documentUrls": "[oops",
        },
        headers=auth_headers(graduate),
    )

    assert response.status_code == 201
    project = response.json()["project"]
    assert project["images"] == [DRIVE_IMAGE]
    assert project["videos"] == [YOUTUBE]
    assert project["documents"] == []
    assert project["status"] == "under_review"
    assert project["graduateId"] == graduate.id

    stored = db.query(Project).one()
    assert json.loads(stored.images) == [DRIVE_IMAGE]
    assert json.loads(stored.documents) == []


def test_create_project_strict_mode_reports_rejections(client, db, graduate, auth_headers):
    response = client.post(
        "/api/projects?strict=true",
        json={
            "title": "Water kiosk",
            "description": "Community water",
            "imageUrls": [DRIVE_IMAGE, "https://imgur.com/x"],
        },
        headers=auth_headers(graduate),
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail == [
        {"field": "images", "rejected": [{"index": 1, "value": "https://imgur.com/x", "reason": "wrong_host"}]}
    ]
    assert db.query(Project).count() == 0


def test_create_project_from_multipart_form(client, graduate, auth_headers):
    response = client.post(
        "/api/projects",
        data={
            "title": "Form project",
            "description": "Sent as multipart",
            "fundingGoal": "5000",
            "imageUrls": json.dumps([DRIVE_IMAGE]),
            "videoUrls": [YOUTUBE, "youtube.com/watch?v=xyz", "bad"],
        },
        files={"cover": ("cover.png", b"png", "image/png")},
        headers=auth_headers(graduate),
    )

    assert response.status_code == 201
    project = response.json()["project"]
    assert project["images"] == [DRIVE_IMAGE]
    assert project["videos"] == [YOUTUBE, "youtube.com/watch?v=xyz"]
    assert project["fundingGoal"] == 5000


def test_create_project_requires_title(client, graduate, auth_headers):
    response = client.post(
        "/api/projects",
        json={"title": "  ", "description": "x"},
        headers=auth_headers(graduate),
    )
    assert response.status_code == 422


def test_create_project_cannot_self_publish(client, graduate, auth_headers):
    response = client.post(
        "/api/projects",
        json={"title": "Shortcut", "description": "x", "status": "published"},
        headers=auth_headers(graduate),
    )
    assert response.status_code == 400


def test_create_project_as_draft(client, graduate, auth_headers):
    response = client.post(
        "/api/projects",
        json={"title": "Later", "description": "x", "status": "draft"},
        headers=auth_headers(graduate),
    )
    assert response.status_code == 201
    assert response.json()["project"]["status"] == "draft"


def test_create_project_requires_graduate_role(client, investor, auth_headers):
    response = client.post(
        "/api/projects",
        json={"title": "Nope", "description": "x"},
        headers=auth_headers(investor),
    )
    assert response.status_code == 403


def test_create_project_requires_token(client):
    response = client.post("/api/projects", json={"title": "Nope", "description": "x"})
    assert response.status_code == 401


# ------- update / delete -------
def test_update_project_renormalizes_media(client, graduate, make_project, auth_headers):
    project = make_project(graduate, images=json.dumps([DRIVE_IMAGE]))

    response = client.put(
        f"/api/projects/{project.id}",
        json={"title": "Renamed", "documentUrls": [DRIVE_DOC, "https://dropbox.com/x"]},
        headers=auth_headers(graduate),
    )

    assert response.status_code == 200
    body = response.json()["project"]
    assert body["title"] == "Renamed"
    assert body["documents"] == [DRIVE_DOC]
    assert body["images"] == [DRIVE_IMAGE]


def test_update_project_by_other_graduate_is_forbidden(client, make_user, make_project, auth_headers):
    owner = make_user(UserType.GRADUATE)
    other = make_user(UserType.GRADUATE)
    project = make_project(owner)

    response = client.put(
        f"/api/projects/{project.id}",
        json={"title": "Hijack"},
        headers=auth_headers(other),
    )
    assert response.status_code == 403


def test_graduate_can_complete_published_project_but_not_publish(client, graduate, make_project, auth_headers):
    published = make_project(graduate)
    pending = make_project(graduate, status=ProjectStatus.UNDER_REVIEW)

    done = client.put(f"/api/projects/{published.id}", json={"status": "completed"}, headers=auth_headers(graduate))
    sneaky = client.put(f"/api/projects/{pending.id}", json={"status": "published"}, headers=auth_headers(graduate))

    assert done.status_code == 200
    assert done.json()["project"]["status"] == "completed"
    assert sneaky.status_code == 400


def test_delete_project(client, graduate, make_project, auth_headers):
    project = make_project(graduate)

    response = client.delete(f"/api/projects/{project.id}", headers=auth_headers(graduate))

    assert response.status_code == 200
    assert client.get(f"/api/projects/{project.id}").status_code == 404


# ------- likes / uploads -------
def test_like_is_counted_once_per_user(client, graduate, investor, make_project, auth_headers):
    project = make_project(graduate)

    first = client.post(f"/api/projects/{project.id}/like", headers=auth_headers(investor))
    second = client.post(f"/api/projects/{project.id}/like", headers=auth_headers(investor))

    assert first.json()["likes"] == 1
    assert second.json()["likes"] == 1


def test_like_missing_project(client, investor, auth_headers):
    assert client.post("/api/projects/404/like", headers=auth_headers(investor)).status_code == 404


def test_upload_media_stores_files_and_appends_attachments(client, graduate, make_project, auth_headers, minio_client):
    project = make_project(graduate)

    response = client.post(
        f"/api/projects/{project.id}/upload-media",
        files=[
            ("images", ("photo.png", b"png-bytes", "image/png")),
            ("documents", ("plan.pdf", b"%PDF-1.4", "application/pdf")),
        ],
        headers=auth_headers(graduate),
    )

    assert response.status_code == 200
    attachments = response.json()["project"]["attachments"]
    assert [a["kind"] for a in attachments] == ["images", "documents"]
    assert attachments[0]["filename"] == "photo.png"
    assert attachments[0]["contentType"] == "image/png"
    assert attachments[0]["url"].startswith(f"http://storage.test/showcase/projects/{project.id}/images/")
    assert len(minio_client.objects) == 2
    assert "showcase" in minio_client.buckets


def test_upload_media_rejects_wrong_content_type(client, graduate, make_project, auth_headers, minio_client):
    project = make_project(graduate)

    response = client.post(
        f"/api/projects/{project.id}/upload-media",
        files=[("videos", ("clip.txt", b"text", "text/plain"))],
        headers=auth_headers(graduate),
    )

    assert response.status_code == 400
    assert minio_client.objects == {}


def test_upload_media_requires_files(client, graduate, make_project, auth_headers):
    project = make_project(graduate)
    response = client.post(
        f"/api/projects/{project.id}/upload-media",
        files=[("other", ("x.bin", b"x", "application/octet-stream"))],
        headers=auth_headers(graduate),
    )
    assert response.status_code == 400
