from backend.messenger.utils.errors import (
    ChatError,
    ErrorKind,
    Result,
    authorization_error,
    error_response,
    not_found,
    status_for,
    storage_error,
    validation_error,
)


def test_then_runs_next_step_on_success():
    result = Result.success(2).then(lambda v: Result.success(v * 10))
    assert result.ok
    assert result.value == 20


def test_then_short_circuits_on_failure():
    calls = []

    def step(value):
        calls.append(value)
        return Result.success(value)

    result = validation_error("Missing content").then(step)
    assert not result.ok
    assert result.error == ChatError(ErrorKind.VALIDATION, "Missing content")
    assert calls == []


def test_authorization_is_always_401():
    error = authorization_error("No authenticated user found").error
    assert status_for(error, 400) == 401
    assert status_for(error, 500) == 401


def test_not_found_follows_endpoint_default():
    error = not_found("User not found: x").error
    assert status_for(error, 404) == 404
    assert status_for(error, 400) == 400


def test_storage_marker_forces_500():
    marked = storage_error("(sqlite3.OperationalError) no such table: chat_message").error
    unmarked = storage_error("connection reset").error
    assert status_for(marked, 400) == 500
    assert status_for(unmarked, 400) == 400


def test_error_response_body_shape():
    response = error_response(not_found("Recipient not found: zz").error, 400)
    assert response.status_code == 400
    assert response.body == b'{"error":"Recipient not found: zz"}'
