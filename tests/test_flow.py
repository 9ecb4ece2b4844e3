from .conftest import bearer, ensure_user


def test_register_login_assign_complete(client):
    boss = ensure_user("boss@example.com", role="admin")
    boss_login = client.post("/api/users/login", json={"email": "boss@example.com", "password": "testpass"}).json()
    assert boss_login["id"] == boss.id

    r = client.post("/api/users/register", json={"name": "Alice", "email": "alice@example.com", "password": "alicepw", "role": "employee"})
    assert r.status_code == 201, r.text
    alice = r.json()

    r = client.post("/api/users/login", json={"email": "alice@example.com", "password": "alicepw"})
    assert r.status_code == 200
    alice_login = r.json()
    assert alice_login["role"] == "employee"
    assert alice_login["id"] == alice["id"]

    r = client.post(
        "/api/tasks",
        json={"title": "Inventory", "description": "Count the chairs", "assignedTo": alice["id"]},
        headers=bearer(boss_login["token"]),
    )
    assert r.status_code == 201, r.text
    task = r.json()
    assert task["createdBy"] == boss.id

    # admin view is unfiltered; filter the way the employee dashboard does
    all_tasks = client.get("/api/tasks", headers=bearer(boss_login["token"])).json()
    mine = [t for t in all_tasks if t["assignedTo"] == alice["id"]]
    assert [t["id"] for t in mine] == [task["id"]]

    r = client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=bearer(alice_login["token"]))
    assert r.status_code == 200
    assert r.json()["status"] == "completed"

    r = client.get(f"/api/tasks/{task['id']}", headers=bearer(alice_login["token"]))
    assert r.json()["status"] == "completed"


def test_health_and_root(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json() == {"message": "API is running..."}
