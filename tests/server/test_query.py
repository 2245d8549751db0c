"""Tests for the query endpoint against an embedded database."""


def select(client, **fields):
    return client.post("/query", json={"table": "loss_reason", **fields})


def test_select_all(client):
    response = select(client, order={"column": "id", "ascending": True})

    assert response.status_code == 200
    data = response.json()
    assert data["error"] is None
    assert data["count"] is None
    assert [row["id"] for row in data["data"]] == [1, 2, 3, 4, 5]


def test_select_with_filter_and_or_expression(client):
    response = select(
        client,
        filters=[{"column": "plant", "type": "eq", "value": "A"}],
        orRaw="status.ilike.open,status.ilike.pending",
        order={"column": "id", "ascending": True},
    )

    assert response.status_code == 200
    assert [row["id"] for row in response.json()["data"]] == [1, 2]


def test_select_with_exact_count_and_range(client):
    response = select(client, select="id", count="exact", order={"column": "id", "ascending": False}, range={"from": 1, "to": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 5
    assert data["data"] == [{"id": 4}, {"id": 3}]


def test_select_not_null(client):
    response = select(client, select="id", **{"not": {"column": "closed_by", "op": "is", "value": None}}, order={"column": "id", "ascending": True})

    assert response.status_code == 200
    assert response.json()["data"] == [{"id": 3}, {"id": 5}]


def test_select_case_sensitive_like(client):
    response = select(client, select="id", filters=[{"column": "status", "type": "like", "value": "Op%"}])
    assert response.json()["data"] == [{"id": 1}]


def test_missing_table(client):
    response = client.post("/query", json={"action": "select"})

    assert response.status_code == 400
    assert response.json() == {"data": None, "error": {"message": "Missing table"}, "count": None}


def test_unknown_action(client):
    response = client.post("/query", json={"table": "loss_reason", "action": "upsert", "payload": [{"id": 1}]})

    assert response.status_code == 400
    assert "upsert" in response.json()["error"]["message"]


def test_invalid_json_body(client):
    response = client.post("/query", content=b"{not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["data"] is None


def test_insert_without_authorization(client):
    response = client.post("/query", json={"table": "loss_reason", "action": "insert", "payload": [{"id": 6, "plant": "C"}]})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Missing Authorization header (Bearer token required)"
    assert len(select(client).json()["data"]) == 5


def test_insert_with_invalid_token(client):
    response = client.post(
        "/query",
        json={"table": "loss_reason", "action": "insert", "payload": [{"id": 6, "plant": "C"}]},
        headers={"Authorization": "Bearer forged"},
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid or expired auth token"


def test_insert(client, auth_headers):
    response = client.post(
        "/query",
        json={"table": "loss_reason", "action": "insert", "payload": [{"id": 6, "plant": "C", "status": "open", "reason": "Die wear"}]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    rows = response.json()["data"]
    assert rows == [{"id": 6, "plant": "C", "status": "open", "reason": "Die wear", "closed_by": None}]
    assert select(client, filters=[{"column": "plant", "value": "C"}]).json()["data"][0]["id"] == 6


def test_insert_only_uses_first_row(client, auth_headers):
    response = client.post(
        "/query",
        json={"table": "loss_reason", "action": "insert", "payload": [{"id": 6, "plant": "C"}, {"id": 7, "plant": "C"}]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert len(select(client, filters=[{"column": "plant", "value": "C"}]).json()["data"]) == 1


def test_insert_with_empty_payload(client, auth_headers):
    response = client.post("/query", json={"table": "loss_reason", "action": "insert", "payload": []}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid payload for insert"


def test_update(client, auth_headers):
    response = client.post(
        "/query",
        json={
            "table": "loss_reason",
            "action": "update",
            "payload": {"status": "closed", "closed_by": "u-operator"},
            "filters": [{"column": "id", "type": "eq", "value": 4}],
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"] == [{"id": 4, "plant": "B", "status": "closed", "reason": "Setup", "closed_by": "u-operator"}]


def test_update_with_list_payload(client, auth_headers):
    response = client.post("/query", json={"table": "loss_reason", "action": "update", "payload": [{"status": "x"}]}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid payload for update"


def test_update_without_filters_updates_every_row(client, auth_headers):
    """No WHERE guard: an unfiltered update touches the whole table."""
    response = client.post("/query", json={"table": "loss_reason", "action": "update", "payload": {"status": "archived"}}, headers=auth_headers)

    assert response.status_code == 200
    assert len(response.json()["data"]) == 5
    statuses = {row["status"] for row in select(client).json()["data"]}
    assert statuses == {"archived"}


def test_delete(client, auth_headers):
    response = client.post(
        "/query",
        json={"table": "loss_reason", "action": "delete", "filters": [{"column": "plant", "type": "eq", "value": "B"}]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"deleted": 2}


def test_delete_with_no_matches(client, auth_headers):
    response = client.post(
        "/query",
        json={"table": "loss_reason", "action": "delete", "filters": [{"column": "plant", "value": "Z"}]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"] == []


def test_delete_without_filters_removes_every_row(client, auth_headers):
    """No WHERE guard: an unfiltered delete empties the table."""
    response = client.post("/query", json={"table": "loss_reason", "action": "delete"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {"deleted": 5}
    assert select(client).json()["data"] == []


def test_database_error(client):
    response = client.post("/query", json={"table": "no_such_table"})

    assert response.status_code == 500
    data = response.json()
    assert data["data"] is None
    assert "no_such_table" in data["error"]["message"]


def test_process_time_header(client):
    response = select(client)
    assert "X-Process-Time" in response.headers
