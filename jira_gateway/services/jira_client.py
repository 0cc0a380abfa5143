from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import httpx

from jira_gateway.core.config import JiraCredentials
from jira_gateway.utils.logging import logger, timed_log_debug


class JiraClientError(Exception):
    """Represents an error interacting with the JIRA API."""

    def __init__(self, message: str, status_code: int = 502, details: Any | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def _error_detail(response: httpx.Response) -> str:
    """Best human-readable failure detail from a JIRA error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        messages: List[str] = [str(m) for m in payload.get("errorMessages") or [] if m]
        errors = payload.get("errors")
        if isinstance(errors, dict):
            messages.extend(f"{field}: {msg}" for field, msg in errors.items())
        if messages:
            return "; ".join(messages)

    text = response.text.strip()
    return text or f"JIRA API error {response.status_code}"


class JiraClient:
    """
    PUBLIC_INTERFACE
    Async JIRA API client with basic auth and structured debug logging.

    Every call is attempted exactly once. Non-2xx responses, transport failures
    and undecodable bodies all surface as JiraClientError.
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not base_url or not email or not api_token:
            raise ValueError("Missing JIRA configuration for client initialization.")
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.api_token = api_token
        self.timeout = timeout
        self.transport = transport
        # Set per action so outbound debug lines carry the inbound request id
        self.request_id: Optional[str] = None
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_credentials(
        cls,
        credentials: JiraCredentials,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "JiraClient":
        return cls(
            base_url=credentials.baseUrl or "",
            email=credentials.email or "",
            api_token=credentials.apiToken or "",
            timeout=timeout,
            transport=transport,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "Authorization": f"Basic {self._basic_token()}",
            }
            kwargs: Dict[str, Any] = {"base_url": f"{self.base_url}/rest/api/3", "headers": headers}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            if self.transport is not None:
                kwargs["transport"] = self.transport
            # Core API is the default base; agile endpoints use absolute URLs
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    def _basic_token(self) -> str:
        return base64.b64encode(f"{self.email}:{self.api_token}".encode("utf-8")).decode("utf-8")

    def _agile_url(self, path: str) -> str:
        return f"{self.base_url}/rest/agile/1.0{path}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        with timed_log_debug(
            "jira_http_request", request_id=self.request_id, extra={"method": method, "url": url}
        ):
            try:
                client = await self._get_client()
                resp = await client.request(method, url, **kwargs)
            except httpx.HTTPError as exc:
                raise JiraClientError(
                    message=str(exc) or exc.__class__.__name__,
                    status_code=502,
                    details={"method": method, "url": url},
                ) from exc

        logger.debug(
            "jira_http_response",
            extra={
                "request_id": self.request_id,
                "method": method,
                "url": url,
                "status_code": resp.status_code,
            },
        )
        if not resp.is_success:
            raise JiraClientError(
                message=_error_detail(resp),
                status_code=resp.status_code,
                details=resp.text,
            )
        return resp

    async def _request_json(self, method: str, url: str, expect: type = dict, **kwargs) -> Any:
        """Decode a JSON body of the ``expect`` type; an empty body yields an empty one."""
        resp = await self._request(method, url, **kwargs)
        if resp.status_code == 204 or not resp.content:
            return expect()
        try:
            data = resp.json()
        except ValueError as exc:
            raise JiraClientError(
                message=f"Malformed JSON response from JIRA ({method} {url})",
                status_code=502,
                details=resp.text[:500],
            ) from exc
        if not isinstance(data, expect):
            raise JiraClientError(
                message=f"Unexpected response shape from JIRA ({method} {url})",
                status_code=502,
                details=resp.text[:500],
            )
        return data

    def _records(self, items: Any, method: str, url: str) -> List[Dict[str, Any]]:
        """A list of JSON objects, or JiraClientError; ``None`` counts as empty."""
        if items is None:
            return []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise JiraClientError(
                message=f"Unexpected response shape from JIRA ({method} {url})",
                status_code=502,
                details=str(items)[:500],
            )
        return items

    async def _paged(self, method: str, url: str, key: str, **kwargs) -> Dict[str, Any]:
        """Decode a JSON object whose ``key`` holds a list of records."""
        data = await self._request_json(method, url, **kwargs)
        data[key] = self._records(data.get(key), method, url)
        return data

    # PUBLIC_INTERFACE
    async def search_issues(
        self,
        jql: str,
        fields: Optional[List[str]] = None,
        start_at: int = 0,
        max_results: int = 100,
    ) -> Dict[str, Any]:
        """
        Search issues using JQL (REST API 3, POST form).
        """
        payload: Dict[str, Any] = {"jql": jql, "startAt": start_at, "maxResults": max_results}
        if fields:
            payload["fields"] = fields
        return await self._paged("POST", "/search", "issues", json=payload)

    # PUBLIC_INTERFACE
    async def update_issue(self, issue_key: str, fields: Dict[str, Any]) -> None:
        """
        Patch fields on a single issue (REST API 3). JIRA answers 204 on success.
        """
        await self._request("PUT", f"/issue/{issue_key}", json={"fields": fields})

    # PUBLIC_INTERFACE
    async def get_myself(self) -> Dict[str, Any]:
        """Return the user the credentials authenticate as."""
        return await self._request_json("GET", "/myself")

    # PUBLIC_INTERFACE
    async def list_fields(self) -> List[Dict[str, Any]]:
        """Return the full field catalog, system and custom."""
        return self._records(await self._request_json("GET", "/field", expect=list), "GET", "/field")

    # PUBLIC_INTERFACE
    async def list_projects(self) -> List[Dict[str, Any]]:
        """Return every project visible to the credentials."""
        return self._records(await self._request_json("GET", "/project", expect=list), "GET", "/project")

    # PUBLIC_INTERFACE
    async def list_boards(self, project_key_or_id: Optional[str] = None) -> Dict[str, Any]:
        """
        List boards, optionally filtered by projectKeyOrId (Agile 1.0).
        """
        params: Dict[str, Any] = {}
        if project_key_or_id:
            params["projectKeyOrId"] = project_key_or_id
        return await self._paged("GET", self._agile_url("/board"), "values", params=params)

    # PUBLIC_INTERFACE
    async def list_sprints(self, board_id: int) -> Dict[str, Any]:
        """
        List sprints for a board id (Agile 1.0).
        """
        return await self._paged("GET", self._agile_url(f"/board/{board_id}/sprint"), "values")

    async def aclose(self) -> None:
        """Close underlying httpx client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
