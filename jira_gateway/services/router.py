from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from jira_gateway.core.config import JiraCredentials
from jira_gateway.models.jira import Action, FieldMappings, GatewayRequest, GatewayResponse
from jira_gateway.services.jira_client import JiraClient, JiraClientError
from jira_gateway.services.mock_data import MockTicketSynthesizer
from jira_gateway.utils.logging import logger

CORE_FIELDS = [
    "key",
    "summary",
    "status",
    "issuetype",
    "created",
    "priority",
    "description",
    "updated",
    "duedate",
    "assignee",
    "reporter",
    "labels",
    "components",
    "fixVersions",
]
DEFAULT_JQL = "project is not EMPTY ORDER BY priority DESC"

PROJECT_KEYS = ("id", "key", "name", "projectTypeKey")
SPRINT_KEYS = ("id", "name", "state", "startDate", "endDate", "completeDate", "goal")
FIELD_KEYS = ("id", "key", "name", "custom", "schema")
USER_KEYS = ("accountId", "displayName", "emailAddress")


@dataclass(frozen=True)
class Success:
    """Envelope keys for a successful action."""
    payload: Dict[str, Any]


@dataclass(frozen=True)
class Failure:
    """Why an action could not be served from JIRA."""
    error: str
    status_code: Optional[int] = None


RouterResult = Union[Success, Failure]
ClientFactory = Callable[[JiraCredentials], JiraClient]
Handler = Callable[[JiraClient, GatewayRequest], Awaitable[RouterResult]]


# PUBLIC_INTERFACE
def build_keys_jql(keys: Iterable[str]) -> str:
    """JQL selecting exactly the given issue keys, in caller order."""
    return f"key in ({','.join(keys)})"


# PUBLIC_INTERFACE
def resolve_jql(jql: Optional[str]) -> str:
    """Caller JQL verbatim, or the default query when blank."""
    if jql and jql.strip():
        return jql
    return DEFAULT_JQL


# PUBLIC_INTERFACE
def build_field_list(mappings: Optional[FieldMappings]) -> List[str]:
    """
    Fields requested from JIRA: the core set plus every enabled calculation and
    display mapping, first occurrence wins.
    """
    fields = list(CORE_FIELDS)
    if mappings is not None:
        fields.extend(mappings.projected_fields())
    return list(dict.fromkeys(fields))


# PUBLIC_INTERFACE
def map_updates(updates: Dict[str, Any], mappings: Optional[FieldMappings]) -> Dict[str, Any]:
    """Translate logical field names to JIRA ids via the export group, dropping unmapped names."""
    if mappings is None:
        return {}
    mapped: Dict[str, Any] = {}
    for name, value in updates.items():
        field_id = mappings.export_field(name)
        if field_id:
            mapped[field_id] = value
    return mapped


def _pick(obj: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    return {k: obj[k] for k in keys if k in obj}


class GatewayRouter:
    """
    PUBLIC_INTERFACE
    Translate gateway actions into JIRA calls.

    ``handle`` never raises for missing credentials or JIRA failures; it
    answers with synthesized tickets and ``mock: true`` instead. ``dispatch``
    exposes the underlying Success/Failure result.
    """

    def __init__(
        self,
        defaults: JiraCredentials,
        synthesizer: Optional[MockTicketSynthesizer] = None,
        client_factory: Optional[ClientFactory] = None,
        max_results: int = 100,
        timeout: Optional[float] = None,
    ) -> None:
        self.defaults = defaults
        self.synthesizer = synthesizer or MockTicketSynthesizer()
        self.client_factory: ClientFactory = client_factory or (
            lambda creds: JiraClient.from_credentials(creds, timeout=timeout)
        )
        self.max_results = max_results
        self._handlers: Dict[Action, Handler] = {
            Action.FETCH_BY_KEYS: self._fetch_by_keys,
            Action.FETCH_BY_JQL: self._fetch_by_jql,
            Action.UPDATE_FIELDS: self._update_fields,
            Action.TEST_CONNECTION: self._test_connection,
            Action.GET_FIELDS: self._get_fields,
            Action.GET_PROJECTS: self._get_projects,
            Action.GET_SPRINTS: self._get_sprints,
        }

    @property
    def handled_actions(self) -> List[Action]:
        return list(self._handlers)

    def resolve_credentials(self, override: Optional[JiraCredentials]) -> JiraCredentials:
        if override is None:
            return self.defaults
        return override.merged_over(self.defaults)

    # PUBLIC_INTERFACE
    async def handle(self, request: GatewayRequest, request_id: Optional[str] = None) -> GatewayResponse:
        credentials = self.resolve_credentials(request.jiraConfig)
        if not credentials.complete:
            logger.info(
                "jira_credentials_missing action=%s missing=%s",
                request.action,
                ",".join(credentials.missing()),
                extra={"request_id": request_id},
            )
            return self.mock_response(request, message="JIRA credentials not configured, returning mock data")

        result = await self.dispatch(request, credentials, request_id=request_id)
        if isinstance(result, Success):
            try:
                return GatewayResponse(mock=False, success=True, **result.payload)
            except ValidationError as exc:
                result = Failure(
                    error=f"Unexpected response shape from JIRA ({exc.error_count()} invalid value(s))",
                    status_code=502,
                )

        logger.warning(
            "jira_request_failed action=%s status_code=%s error=%s",
            request.action,
            result.status_code,
            result.error,
            extra={"request_id": request_id},
        )
        return self.mock_response(request, error=result.error, message="JIRA request failed, returning mock data")

    # PUBLIC_INTERFACE
    async def dispatch(
        self, request: GatewayRequest, credentials: JiraCredentials, request_id: Optional[str] = None
    ) -> RouterResult:
        """Run one action against JIRA with already-resolved credentials."""
        action = Action.parse(request.action)
        handler = self._handlers[action] if action is not None else self._fetch_default
        client = self.client_factory(credentials)
        client.request_id = request_id
        try:
            return await handler(client, request)
        except JiraClientError as exc:
            return Failure(error=exc.message, status_code=exc.status_code)
        finally:
            await client.aclose()

    def mock_response(
        self, request: GatewayRequest, error: Optional[str] = None, message: Optional[str] = None
    ) -> GatewayResponse:
        keys = request.key_list()
        issues = self.synthesizer.synthesize(request.context(), size_hint=len(keys) or None)
        return GatewayResponse(mock=True, issues=issues, total=len(issues), error=error, message=message)

    async def _search(self, client: JiraClient, request: GatewayRequest, jql: str) -> RouterResult:
        data = await client.search_issues(
            jql=jql,
            fields=build_field_list(request.fieldMappings),
            start_at=request.startAt,
            max_results=request.maxResults or self.max_results,
        )
        issues = data.get("issues") or []
        return Success({"issues": issues, "total": data.get("total", len(issues))})

    async def _fetch_by_keys(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        keys = request.key_list()
        if not keys:
            return Failure(error="No issue keys provided for fetchByKeys")
        return await self._search(client, request, build_keys_jql(keys))

    async def _fetch_by_jql(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        return await self._search(client, request, resolve_jql(request.jql))

    async def _fetch_default(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        logger.info(
            "unknown_action_default_search action=%s", request.action, extra={"request_id": client.request_id}
        )
        return await self._search(client, request, DEFAULT_JQL)

    async def _update_fields(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        if not request.ticketKey:
            return Failure(error="ticketKey is required for updateFields")
        fields = map_updates(request.updates or {}, request.fieldMappings)
        if not fields:
            return Success(
                {"ticketKey": request.ticketKey, "updatedFields": [], "message": "No mapped fields to update"}
            )
        await client.update_issue(request.ticketKey, fields)
        return Success({"ticketKey": request.ticketKey, "updatedFields": list(fields)})

    async def _test_connection(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        me = await client.get_myself()
        user = _pick(me, USER_KEYS)
        name = user.get("displayName") or user.get("emailAddress") or "unknown user"
        return Success({"user": user, "message": f"Connected to JIRA as {name}"})

    async def _get_fields(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        catalog = await client.list_fields()
        custom = [_pick(f, FIELD_KEYS) for f in catalog if f.get("custom") is True]
        system = [_pick(f, FIELD_KEYS) for f in catalog if f.get("custom") is not True]
        return Success({"customFields": custom, "systemFields": system, "total": len(catalog)})

    async def _get_projects(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        projects = await client.list_projects()
        return Success({"projects": [_pick(p, PROJECT_KEYS) for p in projects], "total": len(projects)})

    async def _get_sprints(self, client: JiraClient, request: GatewayRequest) -> RouterResult:
        if not request.projectId:
            return Failure(error="projectId is required for getSprints")
        boards = (await client.list_boards(request.projectId)).get("values") or []
        if not boards:
            return Success({"sprints": [], "message": f"No board found for project {request.projectId}"})
        board_id = boards[0].get("id")
        if board_id is None:
            return Failure(error=f"Board for project {request.projectId} has no id")
        sprints = (await client.list_sprints(board_id)).get("values") or []
        return Success({"boardId": board_id, "sprints": [_pick(s, SPRINT_KEYS) for s in sprints]})
