from __future__ import annotations

import concurrent.futures
import json


def test_post_without_id_assigns_one(write_db, make_client):
    write_db({})
    with make_client() as client:
        r = client.post("/users", json={"name": "Ana"})
        assert r.status_code == 201
        new_id = r.json()
        assert isinstance(new_id, str) and new_id

        r = client.get("/users")
        assert r.status_code == 200
        assert r.json() == [{"name": "Ana", "id": new_id}]


def test_post_duplicate_id_conflicts(write_db, make_client, read_db):
    write_db({})
    with make_client() as client:
        r = client.post("/users", json={"id": "1", "name": "Bo"})
        assert r.status_code == 201
        assert r.json() == "1"

        r = client.post("/users", json={"id": "1", "name": "Bo"})
        assert r.status_code == 409
        assert r.json() == {"detail": "Duplicate ID"}

        assert client.get("/users").json() == [{"id": "1", "name": "Bo"}]
    assert read_db() == {"users": [{"id": "1", "name": "Bo"}]}


def test_put_unknown_item_is_404(write_db, make_client, read_db):
    write_db({"users": [{"id": "2", "name": "Dee"}]})
    with make_client() as client:
        r = client.put("/users/1", json={"id": "1", "name": "Cy"})
        assert r.status_code == 404
        assert r.json() == {"detail": "Item not found"}

        r = client.put("/posts/1", json={"id": "1"})
        assert r.status_code == 404
        assert r.json() == {"detail": "Resource not found"}
    assert read_db() == {"users": [{"id": "2", "name": "Dee"}]}


def test_put_replaces_record(write_db, make_client, read_db):
    write_db({"users": [{"id": "1", "name": "Bo", "age": 3}]})
    with make_client() as client:
        r = client.put("/users/1", json={"id": "1", "name": "Cy"})
        assert r.status_code == 200
        assert r.json() == "1"
        assert client.get("/users/1").json() == {"id": "1", "name": "Cy"}
    assert read_db() == {"users": [{"id": "1", "name": "Cy"}]}


def test_delete_then_get_is_404(write_db, make_client, read_db):
    write_db({"users": [{"id": "1", "name": "Bo"}, {"id": "2"}]})
    with make_client() as client:
        r = client.delete("/users/1")
        assert r.status_code == 200
        assert r.json() == {"id": "1", "name": "Bo"}

        r = client.get("/users/1")
        assert r.status_code == 404

        r = client.delete("/users/1")
        assert r.status_code == 404
    assert read_db() == {"users": [{"id": "2"}]}


def test_get_unknown_resource_is_404(write_db, make_client):
    write_db({"users": []})
    with make_client() as client:
        r = client.get("/posts")
        assert r.status_code == 404
        assert r.json() == {"detail": "Resource not found"}

        r = client.get("/posts/1")
        assert r.status_code == 404

        # an existing but empty collection is not "not found"
        r = client.get("/users")
        assert r.status_code == 200
        assert r.json() == []


def test_non_object_bodies_are_400(write_db, make_client, read_db):
    write_db({"users": [{"id": "1"}]})
    with make_client() as client:
        headers = {"content-type": "application/json"}
        for body in ([1, 2], "text", 5, None):
            raw = json.dumps(body)
            r = client.post("/users", content=raw, headers=headers)
            assert r.status_code == 400, raw
            assert r.json() == {"detail": "Expected JSON object"}

            r = client.put("/users/1", content=raw, headers=headers)
            assert r.status_code == 400, body

        r = client.post("/users", json={"id": 7})
        assert r.status_code == 400

        r = client.post("/users", content=b"{broken", headers={"content-type": "application/json"})
        assert r.status_code == 400
        assert r.json() == {"detail": "Invalid JSON body"}
    assert read_db() == {"users": [{"id": "1"}]}


def test_lone_object_collection_is_served_as_array(write_db, make_client):
    write_db({"profile": {"id": "me", "name": "Ana"}})
    with make_client() as client:
        assert client.get("/profile").json() == [{"id": "me", "name": "Ana"}]
        assert client.get("/profile/me").json() == {"id": "me", "name": "Ana"}


def test_save_failure_is_500_and_memory_advances(write_db, make_client, db_path, monkeypatch):
    write_db({})
    with make_client() as client:
        from persistence import disk_store

        def _fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(disk_store, "atomic_write_json", _fail)
        r = client.post("/users", json={"id": "1"})
        assert r.status_code == 500
        assert r.json() == {"detail": "Failed to write to JSON file"}

        # documented limitation: the record is visible although the save failed
        assert client.get("/users/1").json() == {"id": "1"}
    assert db_path.read_text(encoding="utf-8").strip() == "{}"


def test_parallel_posts_over_http(write_db, make_client, read_db):
    write_db({})
    with make_client() as client:
        with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
            responses = list(pool.map(lambda i: client.post("/items", json={"n": i}), range(40)))
        assert all(r.status_code == 201 for r in responses)
        ids = {r.json() for r in responses}
        assert len(ids) == 40
        assert {r["id"] for r in client.get("/items").json()} == ids
    assert len(read_db()["items"]) == 40
