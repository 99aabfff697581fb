from conftest import image, pdf


def test_generic_upload(admin_client, store):
    resp = admin_client.post("/api/upload", data={"file": image("My Photo.jpg")}, content_type="multipart/form-data")
    assert resp.status_code == 200
    out = resp.get_json()
    assert out["bucket"] == "equipments"
    assert out["folder"] == "general"
    assert out["originalName"] == "My Photo.jpg"
    assert out["path"].startswith("general/") and out["path"].endswith("_My_Photo.jpg")
    assert out["url"] == f"https://storage.test/public/equipments/{out['path']}"
    assert store.download("equipments", out["path"]) == b"x" * 16


def test_bucket_follows_folder(admin_client):
    out = admin_client.post(
        "/api/upload", data={"file": image(), "folder": "vehicle-docs"}, content_type="multipart/form-data"
    ).get_json()
    assert out["bucket"] == "vehicles"
    out = admin_client.post(
        "/api/upload", data={"file": image(), "folder": "profile"}, content_type="multipart/form-data"
    ).get_json()
    assert out["bucket"] == "avatars"


def test_documents_only_in_maintenance_folders(admin_client):
    resp = admin_client.post("/api/upload", data={"file": pdf()}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"].startswith("Invalid file type. Allowed types: image/jpeg")

    resp = admin_client.post(
        "/api/upload", data={"file": pdf(), "folder": "maintenance-attachments"}, content_type="multipart/form-data"
    )
    assert resp.status_code == 200


def test_size_limits(admin_client):
    resp = admin_client.post(
        "/api/upload", data={"file": image(size=10 * 1024 * 1024 + 1)}, content_type="multipart/form-data"
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "File too large. Maximum size is 10MB."

    resp = admin_client.post(
        "/api/upload",
        data={"file": image(size=12 * 1024 * 1024), "folder": "equipment/maintenance-parts"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200


def test_missing_file(admin_client):
    resp = admin_client.post("/api/upload", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "No file provided"


def test_upload_requires_login(app):
    assert app.test_client().post("/api/upload").status_code == 401


def test_folder_segments_are_sanitized(admin_client, store):
    out = admin_client.post(
        "/api/upload", data={"file": image(), "folder": "/site photos//north#1/"}, content_type="multipart/form-data"
    ).get_json()
    assert out["folder"] == "site_photos/north_1"
    assert out["path"].startswith("site_photos/north_1/")


def test_folder_traversal_is_rejected(admin_client, store):
    resp = admin_client.post(
        "/api/upload", data={"file": image(), "folder": "general/../../secrets"}, content_type="multipart/form-data"
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Invalid folder"
    assert store.paths("equipments") == []


def test_profile_image_upload(admin_client, app, store):
    resp = admin_client.post(
        "/api/upload/profile-image", data={"file": image("me.png", mimetype="image/png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    out = resp.get_json()
    me = admin_client.get("/api/auth/me").get_json()
    assert out["path"].startswith(f"profiles/{me['id']}_") and out["path"].endswith(".png")
    assert out["url"] == f"https://storage.test/public/avatars/{out['path']}"
    assert store.paths("avatars") == [out["path"]]


def test_profile_image_rules(admin_client):
    resp = admin_client.post(
        "/api/upload/profile-image", data={"file": image("a.gif", mimetype="image/gif")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "Invalid file type. Only JPEG, PNG, and WebP are allowed."

    resp = admin_client.post(
        "/api/upload/profile-image", data={"file": image(size=5 * 1024 * 1024 + 1)},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["message"] == "File too large. Maximum size is 5MB."
