import logging

from jira_gateway.utils.logging import ExtraFormatter, RequestIDFilter


def _format(**extra):
    record = logging.LogRecord("jira_gateway", logging.INFO, __file__, 1, "request_completed", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    RequestIDFilter().filter(record)
    return ExtraFormatter(fmt="%(message)s request_id=%(request_id)s").format(record)


def test_extra_fields_are_written_after_the_message():
    line = _format(request_id="req-1", path="/api/jira", status_code=200)
    assert line == "request_completed request_id=req-1 path=/api/jira status_code=200"


def test_plain_record_has_no_trailing_fields():
    assert _format() == "request_completed request_id=None"
