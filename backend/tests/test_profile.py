def test_profile_reflects_signup_details(client, signup_user):
    signup_user("profile@example.com", fullName="Ada Lovelace", mobileNumber="555-0100")

    response = client.get("/api/user/profile")

    assert response.status_code == 200
    assert response.json() == {
        "email": "profile@example.com",
        "fullName": "Ada Lovelace",
        "mobileNumber": "555-0100",
        "profilePictureUrl": "",
    }


def test_update_profile_changes_supplied_fields(client, signup_user):
    signup_user("profile@example.com", fullName="Ada")

    response = client.put(
        "/api/user/profile",
        json={"mobileNumber": " 555-0199 ", "profilePictureUrl": "https://utfs.io/f/avatar"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "message": "Profile updated successfully",
        "email": "profile@example.com",
        "fullName": "Ada",
        "mobileNumber": "555-0199",
        "profilePictureUrl": "https://utfs.io/f/avatar",
    }
    assert client.get("/api/user/profile").json()["mobileNumber"] == "555-0199"


def test_profile_requires_a_session(client):
    assert client.get("/api/user/profile").status_code == 401
    assert client.put("/api/user/profile", json={"fullName": "x"}).status_code == 401
