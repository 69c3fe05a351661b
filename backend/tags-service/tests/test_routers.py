"""HTTP tests for the tags service routers."""

import pytest
from fastapi.testclient import TestClient
from main import app
from utils.dependencies import get_db

USER_HEADERS = {"X-User-ID": "1001"}


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "tags-service",
            "database": "ok",
        }


class TestTagEndpoints:
    def test_create_and_list(self, client):
        created = client.post("/tags", json={"name": "optics", "description": "Light"})
        listed = client.get("/tags")

        assert created.status_code == 201
        assert created.json()["name"] == "optics"
        assert listed.json() == [
            {
                "id": created.json()["id"],
                "name": "optics",
                "description": "Light",
                "usage_count": 0,
            }
        ]

    def test_duplicate_name_is_400(self, client, tags):
        response = client.post("/tags", json={"name": "PHYSICS"})

        assert response.status_code == 400

    def test_unknown_tag_is_404(self, client, tags):
        assert client.get("/tags/9999").status_code == 404

    def test_update(self, client, tags):
        response = client.put(f"/tags/{tags['biology']}", json={"name": "life"})

        assert response.status_code == 200
        assert response.json()["name"] == "life"

    def test_delete_in_use_is_409(self, client, tags, make_association):
        make_association(tags["physics"], 1)

        assert client.delete(f"/tags/{tags['physics']}").status_code == 409
        assert client.delete(f"/tags/{tags['biology']}").status_code == 204


class TestObjectEndpoints:
    def test_tag_object_reports_creation(self, client, tags):
        payload = {"scope": "resources", "object_id": 12, "tag_id": tags["physics"]}

        first = client.post("/objects", json=payload, headers=USER_HEADERS)
        second = client.post("/objects", json=payload, headers=USER_HEADERS)

        assert first.status_code == 201
        assert first.json()["created"] is True
        assert first.json()["tagger_id"] == 1001
        assert second.json()["created"] is False
        assert second.json()["id"] == first.json()["id"]

    def test_user_header_is_required(self, client, tags):
        payload = {"scope": "resources", "object_id": 12, "tag_id": tags["physics"]}

        assert client.post("/objects", json=payload).status_code == 401

    @pytest.mark.parametrize("scope, object_id", [("", 12), ("resources", 0)])
    def test_invalid_association_is_400(self, client, tags, scope, object_id):
        payload = {"scope": scope, "object_id": object_id, "tag_id": tags["physics"]}

        response = client.post("/objects", json=payload, headers=USER_HEADERS)

        assert response.status_code == 400

    def test_unknown_tag_is_404(self, client, tags):
        payload = {"scope": "resources", "object_id": 12, "tag_id": 9999}

        response = client.post("/objects", json=payload, headers=USER_HEADERS)

        assert response.status_code == 404

    def test_lookup_and_untag(self, client, tags, make_association):
        association_id = make_association(tags["physics"], 12)
        params = {"scope": "resources", "object_id": 12, "tag_id": tags["physics"]}

        found = client.get("/objects/lookup", params=params, headers=USER_HEADERS)
        removed = client.delete("/objects", params=params, headers=USER_HEADERS)
        missing = client.get("/objects/lookup", params=params, headers=USER_HEADERS)

        assert found.json()["id"] == association_id
        assert removed.json() == {"removed": 1}
        assert missing.status_code == 404


class TestMergeAndCopyEndpoints:
    def test_merge(self, client, tags, make_association):
        make_association(tags["physics"], 1)
        make_association(tags["chemistry"], 1)
        make_association(tags["physics"], 2)

        response = client.post(
            f"/tags/{tags['physics']}/merge",
            json={"target_tag_id": tags["chemistry"]},
            headers=USER_HEADERS,
        )
        logs = client.get(f"/tags/{tags['chemistry']}/logs", headers=USER_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["action"] == "objects_moved"
        assert body["target_tag_name"] == "chemistry"
        assert body["warnings"] == []
        assert [entry["action"] for entry in logs.json()] == ["objects_moved"]
        assert logs.json()[0]["actor_id"] == 1001
        assert client.delete(f"/tags/{tags['physics']}").status_code == 204

    def test_merge_into_itself_is_400(self, client, tags):
        response = client.post(
            f"/tags/{tags['physics']}/merge",
            json={"target_tag_id": tags["physics"]},
            headers=USER_HEADERS,
        )

        assert response.status_code == 400

    def test_merge_unknown_target_is_404(self, client, tags):
        response = client.post(
            f"/tags/{tags['physics']}/merge",
            json={"target_tag_id": 9999},
            headers=USER_HEADERS,
        )

        assert response.status_code == 404

    def test_copy_with_scope(self, client, tags, make_association):
        make_association(tags["physics"], 1, scope="resources")
        make_association(tags["physics"], 2, scope="tickets")

        response = client.post(
            f"/tags/{tags['physics']}/copy",
            json={"target_tag_id": tags["nanotech"], "scope": "tickets"},
            headers=USER_HEADERS,
        )
        search = client.get("/search", params={"tags": str(tags["nanotech"])})

        assert response.status_code == 200
        assert response.json()["action"] == "objects_copied"
        assert [(item["scope"], item["object_id"]) for item in search.json()["items"]] == [
            ("tickets", 2)
        ]


class TestSearchEndpoint:
    def test_search(self, client, tags, make_association):
        make_association(tags["physics"], 1)
        make_association(tags["chemistry"], 1)
        make_association(tags["physics"], 2)

        response = client.get(
            "/search", params={"tags": f"{tags['physics']},{tags['chemistry']}"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["categories"] == [{"scope": "resources", "total": 1}]
        assert body["items"][0]["object_id"] == 1

    def test_space_separated_tags(self, client, tags, make_association):
        make_association(tags["physics"], 1)
        make_association(tags["chemistry"], 1)

        response = client.get(
            "/search", params={"tags": f"{tags['physics']} {tags['chemistry']}"}
        )

        assert response.json()["tag_ids"] == sorted([tags["physics"], tags["chemistry"]])
        assert response.json()["total"] == 1

    @pytest.mark.parametrize(
        "params",
        [
            {"tags": ""},
            {"tags": "abc"},
            {"tags": "1", "sort": "name"},
            {"tags": "1", "limit": 1000},
            {"tags": "1", "page": 0},
        ],
    )
    def test_invalid_parameters_are_400(self, client, params):
        assert client.get("/search", params=params).status_code == 400
