"""Tests for the QueryProxy request handler."""

import pytest

from dmsproxy.errors import AuthInvalidError, AuthRequiredError, BackendError, InvalidPayloadError, UnknownActionError
from dmsproxy.query.proxy import QueryProxy


@pytest.fixture
def proxy(recording_backend, verifier) -> QueryProxy:
    return QueryProxy(recording_backend, verifier)


async def test_select_runs_one_statement(proxy, recording_backend):
    recording_backend.rows = [{"id": 1}]

    result = await proxy.handle({"table": "loss_reason", "filters": [{"column": "plant", "type": "eq", "value": "A"}]})

    assert result.data == [{"id": 1}]
    assert result.count is None
    assert recording_backend.calls == [("fetch", "SELECT * FROM loss_reason WHERE plant = $1", ["A"])]


async def test_select_with_exact_count_runs_count_first(proxy, recording_backend):
    recording_backend.value = 12
    recording_backend.rows = [{"id": 1}, {"id": 2}]

    result = await proxy.handle({"table": "loss_reason", "count": "exact", "range": {"from": 0, "to": 1}})

    assert result.count == 12
    assert [call[0] for call in recording_backend.calls] == ["fetch_value", "fetch"]
    assert recording_backend.calls[0][1] == "SELECT COUNT(*)::int AS count FROM loss_reason"
    assert recording_backend.calls[1][1] == "SELECT * FROM loss_reason LIMIT 2 OFFSET 0"


async def test_select_needs_no_credentials(proxy):
    result = await proxy.handle({"table": "loss_reason"}, authorization=None)
    assert result.data == []


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "bearer token-operator"])
async def test_insert_without_bearer_issues_no_sql(proxy, recording_backend, header):
    with pytest.raises(AuthRequiredError) as exc_info:
        await proxy.handle({"table": "loss_reason", "action": "insert", "payload": [{"id": 9}]}, authorization=header)

    assert exc_info.value.status_code == 401
    assert recording_backend.calls == []


async def test_invalid_token_issues_no_sql(proxy, recording_backend):
    with pytest.raises(AuthInvalidError) as exc_info:
        await proxy.handle({"table": "loss_reason", "action": "delete"}, authorization="Bearer forged")

    assert exc_info.value.message == "Invalid or expired auth token"
    assert recording_backend.calls == []


async def test_authentication_precedes_payload_validation(proxy):
    with pytest.raises(AuthRequiredError):
        await proxy.handle({"table": "loss_reason", "action": "insert", "payload": []})


async def test_invalid_payload_issues_no_sql(proxy, recording_backend, auth_headers):
    with pytest.raises(InvalidPayloadError):
        await proxy.handle({"table": "loss_reason", "action": "insert", "payload": []}, authorization=auth_headers["Authorization"])
    assert recording_backend.calls == []


async def test_unknown_action_needs_no_credentials(proxy, recording_backend):
    with pytest.raises(UnknownActionError) as exc_info:
        await proxy.handle({"table": "loss_reason", "action": "upsert", "payload": [{"id": 1}]})
    assert exc_info.value.message == "Unknown action: upsert"
    assert recording_backend.calls == []


async def test_insert_returns_inserted_rows(proxy, recording_backend, auth_headers):
    recording_backend.rows = [{"a": 1, "b": 2}]

    result = await proxy.handle({"table": "t", "action": "insert", "payload": [{"a": 1, "b": 2}]}, authorization=auth_headers["Authorization"])

    assert result.data == [{"a": 1, "b": 2}]
    assert recording_backend.calls == [("fetch", "INSERT INTO t (a,b) VALUES ($1,$2) RETURNING *", [1, 2])]


async def test_update_without_filters_still_executes(proxy, recording_backend, auth_headers):
    """There is no guard against updating every row."""
    await proxy.handle({"table": "t", "action": "update", "payload": {"status": "closed"}}, authorization=auth_headers["Authorization"])
    assert recording_backend.calls == [("fetch", "UPDATE t SET status = $1 RETURNING *", ["closed"])]


async def test_delete_without_filters_still_executes(proxy, recording_backend, auth_headers):
    """There is no guard against deleting every row."""
    recording_backend.affected = 5

    result = await proxy.handle({"table": "t", "action": "delete"}, authorization=auth_headers["Authorization"])

    assert result.data == {"deleted": 5}
    assert recording_backend.calls == [("execute", "DELETE FROM t", [])]


async def test_delete_with_no_matches_returns_empty_list(proxy, recording_backend, auth_headers):
    recording_backend.affected = 0
    result = await proxy.handle({"table": "t", "action": "delete", "filters": [{"column": "id", "value": 99}]}, authorization=auth_headers["Authorization"])
    assert result.data == []


async def test_backend_errors_propagate(proxy, recording_backend):
    async def failing_fetch(sql, params):
        raise BackendError('relation "nope" does not exist')

    recording_backend.fetch = failing_fetch

    with pytest.raises(BackendError) as exc_info:
        await proxy.handle({"table": "nope"})
    assert exc_info.value.status_code == 500
    assert "does not exist" in exc_info.value.message
