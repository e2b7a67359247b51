import logging

from src.outlook_features.cli import _AuthorizationRedactingFilter


def _record(msg: str, args=()) -> logging.LogRecord:
    return logging.LogRecord(
        name="src.outlook_features.scoring",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_bearer_token_is_masked() -> None:
    """Ensure bearer tokens never reach the log output."""

    record = _record("Headers: {'Authorization': 'Bearer abc.def-123'}")

    assert _AuthorizationRedactingFilter().filter(record) is True
    assert record.getMessage() == "Headers: {'Authorization': 'Bearer ***'}"


def test_bearer_token_in_args_is_masked() -> None:
    record = _record("Request failed: %s", ("Authorization: Bearer secret-key",))

    _AuthorizationRedactingFilter().filter(record)

    assert "secret-key" not in record.getMessage()
    assert record.getMessage() == "Request failed: Authorization: Bearer ***"


def test_plain_message_is_untouched() -> None:
    record = _record("Scored %s records", (3,))

    assert _AuthorizationRedactingFilter().filter(record) is True
    assert record.msg == "Scored %s records"
    assert record.args == (3,)
