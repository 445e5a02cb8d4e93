def _create_folder(client, **payload) -> dict:
    response = client.post("/api/folders", json=payload)
    assert response.status_code == 201
    return response.json()["folder"]


def test_create_and_list_folders_in_creation_order(client, signup_user):
    signup_user()
    work = _create_folder(client, name="  Work ")
    home = _create_folder(client, name="Home", color="#ef4444")

    assert work["name"] == "Work"
    assert work["color"] == "#3b82f6"
    assert home["color"] == "#ef4444"

    folders = client.get("/api/folders").json()["folders"]
    assert [folder["name"] for folder in folders] == ["Work", "Home"]


def test_folder_name_is_required(client, signup_user):
    signup_user()

    for payload in ({}, {"name": "   "}):
        response = client.post("/api/folders", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Folder name is required"


def test_update_folder(client, signup_user):
    signup_user()
    folder = _create_folder(client, name="Work")

    renamed = client.put(f"/api/folders/{folder['id']}", json={"name": "Office"})
    assert renamed.status_code == 200
    assert renamed.json()["message"] == "Folder updated successfully"
    assert renamed.json()["folder"]["name"] == "Office"
    assert renamed.json()["folder"]["color"] == "#3b82f6"

    recolored = client.put(f"/api/folders/{folder['id']}", json={"color": "#10b981"})
    assert recolored.json()["folder"] == {**renamed.json()["folder"], "color": "#10b981"}

    blank = client.put(f"/api/folders/{folder['id']}", json={"name": " "})
    assert blank.status_code == 400
    assert blank.json()["error"] == "Folder name cannot be empty"


def test_deleting_folder_moves_its_notes_to_general(client, signup_user):
    signup_user()
    folder = _create_folder(client, name="Work")
    moved = client.post("/api/notes", json={"title": "Standup", "folder": "Work"}).json()["note"]
    untouched = client.post("/api/notes", json={"title": "Groceries", "folder": "Home"}).json()["note"]

    response = client.delete(f"/api/folders/{folder['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Folder deleted successfully, notes moved to General"}
    assert client.get("/api/folders").json()["folders"] == []
    assert client.get(f"/api/notes/{moved['id']}").json()["note"]["folder"] == "General"
    assert client.get(f"/api/notes/{untouched['id']}").json()["note"]["folder"] == "Home"


def test_deleting_folder_leaves_other_users_notes_alone(client, signup_user):
    signup_user("other@example.com")
    foreign = client.post("/api/notes", json={"title": "Theirs", "folder": "Work"}).json()["note"]

    client.cookies.clear()
    signup_user("owner@example.com")
    folder = _create_folder(client, name="Work")
    assert client.delete(f"/api/folders/{folder['id']}").status_code == 200

    client.cookies.clear()
    client.post("/api/auth/login", json={"email": "other@example.com", "password": "secret123"})
    assert client.get(f"/api/notes/{foreign['id']}").json()["note"]["folder"] == "Work"


def test_other_users_folders_are_forbidden(client, signup_user):
    signup_user("owner@example.com")
    folder = _create_folder(client, name="Private")

    client.cookies.clear()
    signup_user("intruder@example.com")

    response = client.delete(f"/api/folders/{folder['id']}")
    assert response.status_code == 403
    assert response.json()["error"] == "Forbidden: You do not own this folder"
