"""Profile and avatar API tests."""

from urllib.parse import urlparse

from taskboard.access import system_session
from taskboard.models.profile import Profile

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def test_get_profile_missing(client, auth_headers):
    """Test a user without a saved profile gets null."""
    response = client.get("/api/v1/profile", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() is None


def test_upsert_profile_creates(client, auth_headers):
    """Test the first upsert creates the profile."""
    response = client.put(
        "/api/v1/profile",
        headers=auth_headers,
        json={"name": "Ada", "avatar_url": "https://example.com/ada.png"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["user_id"] == auth_headers.user_id
    assert data["name"] == "Ada"
    assert data["avatar_url"] == "https://example.com/ada.png"
    assert data["display_name"] == "Ada"

    fetched = client.get("/api/v1/profile", headers=auth_headers).json()
    assert fetched["id"] == data["id"]


def test_upsert_profile_twice_keeps_one_row(client, db, auth_headers):
    """Test repeated upserts replace the same row."""
    first = client.put("/api/v1/profile", headers=auth_headers, json={"name": "First"}).json()
    second = client.put("/api/v1/profile", headers=auth_headers, json={"name": "Second"}).json()

    assert second["id"] == first["id"]
    assert second["name"] == "Second"

    with system_session(db):
        rows = db.query(Profile).all()
    assert len(rows) == 1
    assert rows[0].name == "Second"


def test_upsert_profile_nulls(client, auth_headers):
    """Test name and avatar may both be cleared."""
    client.put(
        "/api/v1/profile",
        headers=auth_headers,
        json={"name": "Ada", "avatar_url": "https://example.com/a.png"},
    )
    response = client.put(
        "/api/v1/profile", headers=auth_headers, json={"name": "  ", "avatar_url": None}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] is None
    assert data["avatar_url"] is None
    assert data["display_name"] == "test"


def test_profiles_isolated_between_users(client, auth_headers, other_auth_headers):
    """Test each user only sees their own profile."""
    client.put("/api/v1/profile", headers=auth_headers, json={"name": "Mine"})

    response = client.get("/api/v1/profile", headers=other_auth_headers)
    assert response.json() is None

    client.put("/api/v1/profile", headers=other_auth_headers, json={"name": "Theirs"})
    assert client.get("/api/v1/profile", headers=auth_headers).json()["name"] == "Mine"
    assert client.get("/api/v1/profile", headers=other_auth_headers).json()["name"] == "Theirs"


def test_profile_requires_auth(client):
    """Test profile endpoints need a session."""
    assert client.get("/api/v1/profile").status_code == 401
    assert client.put("/api/v1/profile", json={"name": "x"}).status_code == 401


def test_upload_avatar(client, auth_headers):
    """Test a valid image upload returns a servable URL under the user's prefix."""
    content = PNG_HEADER + b"\x00" * (1024 * 1024)
    response = client.post(
        "/api/v1/profile/avatar",
        headers=auth_headers,
        files={"file": ("me.png", content, "image/png")},
    )
    assert response.status_code == 200
    url = response.json()["avatar_url"]
    path = urlparse(url).path
    segments = path.split("/")
    assert auth_headers.user_id in segments
    assert path.startswith("/storage/avatars/")
    assert path.endswith(".png")

    served = client.get(path)
    assert served.status_code == 200
    assert served.content == content

    # Upload does not touch the profile
    assert client.get("/api/v1/profile", headers=auth_headers).json() is None


def test_upload_avatar_then_save_profile(client, auth_headers):
    """Test the two-step flow of uploading and then saving the URL."""
    url = client.post(
        "/api/v1/profile/avatar",
        headers=auth_headers,
        files={"file": ("me.jpg", b"\xff\xd8\xff" + b"1" * 100, "image/jpeg")},
    ).json()["avatar_url"]

    response = client.put("/api/v1/profile", headers=auth_headers, json={"avatar_url": url})
    assert response.json()["avatar_url"] == url


def test_upload_avatar_twice_distinct_urls(client, auth_headers):
    """Test repeated uploads never reuse an object key."""
    urls = {
        client.post(
            "/api/v1/profile/avatar",
            headers=auth_headers,
            files={"file": ("me.png", PNG_HEADER, "image/png")},
        ).json()["avatar_url"]
        for _ in range(3)
    }
    assert len(urls) == 3


def test_upload_avatar_wrong_type(client, auth_headers):
    """Test non-image uploads are rejected."""
    response = client.post(
        "/api/v1/profile/avatar",
        headers=auth_headers,
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 415
    assert response.json()["code"] == "invalid_content_type"


def test_upload_avatar_svg_rejected(client, auth_headers):
    """Test SVG uploads are rejected."""
    response = client.post(
        "/api/v1/profile/avatar",
        headers=auth_headers,
        files={"file": ("me.svg", b"<svg onload='alert(1)'/>", "image/svg+xml")},
    )
    assert response.status_code == 415
    assert response.json()["code"] == "invalid_content_type"


def test_upload_avatar_too_large(client, auth_headers):
    """Test uploads over 5 MiB are rejected."""
    response = client.post(
        "/api/v1/profile/avatar",
        headers=auth_headers,
        files={"file": ("big.png", b"\x00" * (10 * 1024 * 1024), "image/png")},
    )
    assert response.status_code == 413
    assert response.json()["code"] == "file_too_large"


def test_upload_avatar_requires_auth(client):
    """Test avatar upload needs a session."""
    response = client.post(
        "/api/v1/profile/avatar", files={"file": ("me.png", PNG_HEADER, "image/png")}
    )
    assert response.status_code == 401
