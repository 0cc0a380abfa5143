import asyncio
import json

import httpx
import pytest

from jira_gateway.services.jira_client import JiraClient, JiraClientError


def _client(handler):
    return JiraClient(
        base_url="https://example.atlassian.net/",
        email="user@example.com",
        api_token="token",
        transport=httpx.MockTransport(handler),
    )


def _run(coro_factory, handler):
    async def go():
        client = _client(handler)
        try:
            return await coro_factory(client)
        finally:
            await client.aclose()

    return asyncio.run(go())


def test_requires_complete_configuration():
    with pytest.raises(ValueError):
        JiraClient(base_url="https://example.atlassian.net", email="", api_token="token")


def test_search_posts_jql_and_fields():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"total": 1, "issues": [{"key": "ABC-1", "fields": {}}]})

    data = _run(lambda c: c.search_issues("key in (ABC-1)", fields=["summary"], max_results=5), handler)
    assert data["total"] == 1
    assert seen["url"] == "https://example.atlassian.net/rest/api/3/search"
    body = json.loads(seen["body"])
    assert body == {"jql": "key in (ABC-1)", "startAt": 0, "maxResults": 5, "fields": ["summary"]}


def test_agile_endpoints_use_agile_base():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={"values": []})

    _run(lambda c: c.list_boards("ABC"), handler)
    _run(lambda c: c.list_sprints(3), handler)
    assert seen == ["/rest/agile/1.0/board", "/rest/agile/1.0/board/3/sprint"]


def test_error_messages_become_failure_detail():
    def handler(request):
        return httpx.Response(400, json={"errorMessages": ["Bad JQL", "Field 'x' does not exist"], "errors": {}})

    with pytest.raises(JiraClientError) as info:
        _run(lambda c: c.search_issues("x = 1"), handler)
    assert info.value.message == "Bad JQL; Field 'x' does not exist"
    assert info.value.status_code == 400


def test_empty_error_body_reports_status():
    with pytest.raises(JiraClientError) as info:
        _run(lambda c: c.get_myself(), lambda request: httpx.Response(502))
    assert info.value.message == "JIRA API error 502"


def test_network_error_is_wrapped():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(JiraClientError) as info:
        _run(lambda c: c.list_projects(), handler)
    assert info.value.message == "timed out"
    assert info.value.status_code == 502


def test_malformed_json_is_wrapped():
    def handler(request):
        return httpx.Response(200, content=b"<html>login</html>", headers={"Content-Type": "text/html"})

    with pytest.raises(JiraClientError) as info:
        _run(lambda c: c.list_fields(), handler)
    assert "Malformed JSON" in info.value.message


def test_update_issue_accepts_no_content():
    def handler(request):
        assert request.method == "PUT"
        assert request.url.path == "/rest/api/3/issue/ABC-1"
        return httpx.Response(204)

    assert _run(lambda c: c.update_issue("ABC-1", {"customfield_10020": 4}), handler) is None


def test_non_object_records_are_rejected():
    cases = [
        (lambda c: c.search_issues("x = 1"), {"issues": [1, 2]}),
        (lambda c: c.list_boards("ABC"), {"values": ["x"]}),
        (lambda c: c.list_sprints(3), {"values": "none"}),
        (lambda c: c.list_fields(), ["summary"]),
        (lambda c: c.list_projects(), [{"key": "ABC"}, None]),
    ]
    for call, body in cases:
        with pytest.raises(JiraClientError) as info:
            _run(call, lambda request, body=body: httpx.Response(200, json=body))
        assert info.value.message.startswith("Unexpected response shape from JIRA")
        assert info.value.status_code == 502


def test_missing_record_list_reads_as_empty():
    data = _run(lambda c: c.list_boards("ABC"), lambda request: httpx.Response(200, json={"total": 0}))
    assert data == {"total": 0, "values": []}
