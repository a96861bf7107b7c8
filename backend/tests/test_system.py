DEMO_PASSWORD = "password123"


def login_user(client, email, password=DEMO_PASSWORD):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def test_system_data_lists_lookup_options(client, demo):
    token = login_user(client, "priya@student.edu")
    response = client.get("/api/system/data", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    payload = response.json()
    assert [item["name"] for item in payload["lecturers"]] == ["Dr. Alan G.", "Dr. Perera"]
    assert [item["name"] for item in payload["halls"]] == ["Hall 01 (Main)", "Hall 03 (Annex)", "Lab 02"]
    assert [item["code"] for item in payload["subjects"]] == ["CS201", "CS202", "CS305"]


def test_system_data_requires_login(client, demo):
    assert client.get("/api/system/data").status_code in {401, 403}
