from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jira_gateway.core.config import JiraCredentials


# PUBLIC_INTERFACE
class Action(str, Enum):
    """Closed set of actions the gateway understands."""

    FETCH_BY_KEYS = "fetchByKeys"
    FETCH_BY_JQL = "fetchByJQL"
    UPDATE_FIELDS = "updateFields"
    TEST_CONNECTION = "testConnection"
    GET_FIELDS = "getFields"
    GET_PROJECTS = "getProjects"
    GET_SPRINTS = "getSprints"

    @classmethod
    def parse(cls, value: str) -> Optional["Action"]:
        """Return the matching action, or None for an unrecognized name."""
        try:
            return cls(value)
        except ValueError:
            return None


# PUBLIC_INTERFACE
class FieldMappingEntry(BaseModel):
    """One logical field bound to a JIRA field id."""

    enabled: bool = Field(default=False, description="Only enabled entries are used")
    jiraField: Optional[str] = Field(default=None, description="JIRA field id, e.g. customfield_10001")

    @property
    def active(self) -> bool:
        return self.enabled is True and bool((self.jiraField or "").strip())


# PUBLIC_INTERFACE
class FieldMappings(BaseModel):
    """Caller-supplied field mapping grouped by purpose."""

    calculation: Dict[str, FieldMappingEntry] = Field(default_factory=dict, description="Fields needed for scoring")
    display: Dict[str, FieldMappingEntry] = Field(default_factory=dict, description="Fields needed for presentation")
    export: Dict[str, FieldMappingEntry] = Field(default_factory=dict, description="Fields the caller may write back")

    model_config = ConfigDict(extra="ignore")

    def projected_fields(self) -> List[str]:
        """Active JIRA field ids from the calculation and display groups."""
        return [
            entry.jiraField.strip()
            for group in (self.calculation, self.display)
            for entry in group.values()
            if entry.active
        ]

    def export_field(self, name: str) -> Optional[str]:
        entry = self.export.get(name)
        if entry is None or not entry.active:
            return None
        return entry.jiraField.strip()


# PUBLIC_INTERFACE
class GatewayRequest(BaseModel):
    """POST body accepted by the gateway endpoint."""

    action: str = Field(..., min_length=1, description="Action name, e.g. fetchByKeys")
    keys: Optional[Union[List[str], str]] = Field(default=None, description="Issue keys (list or comma-separated)")
    jql: Optional[str] = Field(default=None, description="JQL for fetchByJQL")
    jiraConfig: Optional[JiraCredentials] = Field(default=None, description="Per-request JIRA credentials")
    fieldMappings: Optional[FieldMappings] = Field(default=None, description="Field mapping configuration")
    ticketKey: Optional[str] = Field(default=None, description="Issue key for updateFields")
    updates: Optional[Dict[str, Any]] = Field(default=None, description="Logical field name -> new value")
    projectId: Optional[str] = Field(default=None, description="Project key or id for getSprints")
    startAt: int = Field(default=0, ge=0, description="Search offset")
    maxResults: Optional[int] = Field(default=None, ge=1, le=1000, description="Search page size")

    model_config = ConfigDict(extra="ignore")

    @field_validator("projectId", mode="before")
    @classmethod
    def _project_id_as_str(cls, value: Any) -> Any:
        # Numeric project ids arrive as JSON numbers
        if isinstance(value, int):
            return str(value)
        return value

    def key_list(self) -> List[str]:
        """Issue keys in caller order, blanks removed."""
        raw = self.keys
        if raw is None:
            return []
        if isinstance(raw, str):
            raw = raw.split(",")
        return [k.strip() for k in raw if k and k.strip()]

    def context(self) -> str:
        """Short description of what was asked for, used to label mock data."""
        if self.jql:
            return self.jql
        keys = self.key_list()
        if keys:
            return ",".join(keys)
        if self.ticketKey:
            return self.ticketKey
        return self.action


# PUBLIC_INTERFACE
class GatewayResponse(BaseModel):
    """
    Uniform response envelope for every action.

    ``mock`` is always present so callers can tell synthesized data from real
    JIRA data; every other key is omitted when unset.
    """

    mock: bool = Field(..., description="True when issues were synthesized")
    success: Optional[bool] = Field(default=None, description="True when JIRA answered successfully")
    issues: Optional[List[Dict[str, Any]]] = Field(default=None, description="Tickets")
    total: Optional[int] = Field(default=None, description="Total matches reported by JIRA")
    error: Optional[str] = Field(default=None, description="Failure detail when falling back to mock data")
    message: Optional[str] = Field(default=None, description="Informational message")

    # Action-specific payloads
    user: Optional[Dict[str, Any]] = None
    customFields: Optional[List[Dict[str, Any]]] = None
    systemFields: Optional[List[Dict[str, Any]]] = None
    projects: Optional[List[Dict[str, Any]]] = None
    boardId: Optional[int] = None
    sprints: Optional[List[Dict[str, Any]]] = None
    ticketKey: Optional[str] = None
    updatedFields: Optional[List[str]] = None

    def to_body(self) -> Dict[str, Any]:
        # Only top-level keys are dropped; null JIRA field values inside issues are kept
        return {k: v for k, v in self.model_dump().items() if v is not None}
