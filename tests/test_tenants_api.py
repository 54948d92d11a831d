import uuid

import pytest


def create(client, headers, identifier, name=None):
    return client.post(
        "/api/tenants",
        json={"name": name or identifier.title(), "identifier": identifier},
        headers=headers,
    )


class TestTenantEndpointsRequireAuth:
    @pytest.mark.parametrize("method,path", [
        ("get", "/api/tenants"),
        ("get", "/api/tenants/paged"),
        ("get", f"/api/tenants/{uuid.uuid4()}"),
        ("delete", f"/api/tenants/{uuid.uuid4()}"),
    ])
    def test_missing_token_is_unauthorized(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401


class TestTenantCrud:
    def test_create_and_get(self, client, auth_headers):
        response = create(client, auth_headers, "globex", "Globex")

        assert response.status_code == 201
        body = response.json()
        assert body["identifier"] == "globex"
        assert body["isActive"] is True
        assert body["createdAt"]

        fetched = client.get(f"/api/tenants/{body['id']}", headers=auth_headers)
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Globex"

    def test_duplicate_identifier_is_conflict(self, client, auth_headers):
        assert create(client, auth_headers, "globex").status_code == 201

        response = create(client, auth_headers, "globex", "Other")

        assert response.status_code == 409
        assert response.json()["type"] == "conflict"

    def test_invalid_identifier_is_bad_request(self, client, auth_headers):
        response = create(client, auth_headers, "Not Valid!")
        assert response.status_code == 400
        assert response.json()["errors"]

    def test_lookup_by_identifier_and_name(self, client, auth_headers):
        create(client, auth_headers, "globex", "Globex")

        by_identifier = client.get("/api/tenants/by-identifier/GLOBEX", headers=auth_headers)
        by_name = client.get("/api/tenants/by-name/Globex", headers=auth_headers)
        missing = client.get("/api/tenants/by-name/Nobody", headers=auth_headers)

        assert by_identifier.status_code == 200
        assert by_name.json()["identifier"] == "globex"
        assert missing.status_code == 404

    def test_check_identifier(self, client, auth_headers):
        taken = client.get("/api/tenants/check-identifier/acme-corp", headers=auth_headers)
        free = client.get("/api/tenants/check-identifier/initech", headers=auth_headers)

        assert taken.json() == {"identifier": "acme-corp", "isAvailable": False}
        assert free.json() == {"identifier": "initech", "isAvailable": True}

    def test_update(self, client, auth_headers):
        tenant_id = create(client, auth_headers, "globex").json()["id"]

        response = client.put(
            f"/api/tenants/{tenant_id}",
            json={"name": "Globex Corporation", "isActive": False,
                  "subscriptionExpiresAt": "2030-01-01T00:00:00Z"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Globex Corporation"
        assert body["isActive"] is False
        assert body["subscriptionExpiresAt"].startswith("2030-01-01")
        assert body["updatedAt"] is not None

    def test_update_unknown_tenant_is_not_found(self, client, auth_headers):
        response = client.put(
            f"/api/tenants/{uuid.uuid4()}",
            json={"name": "Ghost"},
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"

    def test_delete_hides_tenant(self, client, auth_headers):
        tenant_id = create(client, auth_headers, "globex").json()["id"]

        response = client.delete(f"/api/tenants/{tenant_id}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/api/tenants/{tenant_id}", headers=auth_headers).status_code == 404
        assert client.delete(f"/api/tenants/{tenant_id}", headers=auth_headers).status_code == 404
        listed = client.get("/api/tenants", headers=auth_headers).json()
        assert [t["identifier"] for t in listed] == ["acme-corp"]

    def test_deleted_identifier_stays_reserved(self, client, auth_headers):
        tenant_id = create(client, auth_headers, "globex").json()["id"]
        client.delete(f"/api/tenants/{tenant_id}", headers=auth_headers)

        assert create(client, auth_headers, "globex").status_code == 409


class TestTenantPaging:
    @pytest.fixture()
    def seeded(self, client, auth_headers):
        for i in range(11):
            assert create(client, auth_headers, f"tenant-{i:02d}").status_code == 201

    def test_paged_response_shape(self, client, auth_headers, seeded):
        response = client.get(
            "/api/tenants/paged", params={"pageNumber": 2, "pageSize": 5}, headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"items", "totalCount", "pageNumber", "pageSize", "totalPages"}
        assert body["totalCount"] == 12
        assert body["pageNumber"] == 2
        assert body["pageSize"] == 5
        assert body["totalPages"] == 3
        assert len(body["items"]) == 5

    def test_page_past_end_is_empty(self, client, auth_headers, seeded):
        body = client.get(
            "/api/tenants/paged", params={"pageNumber": 9, "pageSize": 5}, headers=auth_headers
        ).json()
        assert body["items"] == []
        assert body["totalCount"] == 12

    def test_paging_inputs_are_clamped(self, client, auth_headers, seeded):
        body = client.get(
            "/api/tenants/paged", params={"pageNumber": 0, "pageSize": 500}, headers=auth_headers
        ).json()
        assert body["pageNumber"] == 1
        assert body["pageSize"] == 100
        assert len(body["items"]) == 12
        assert body["totalPages"] == 1
