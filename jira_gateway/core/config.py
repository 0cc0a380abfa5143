from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_VERSION = "2.0.0"


class JiraCredentials(BaseModel):
    """
    PUBLIC_INTERFACE
    Remote JIRA credentials. Every field is optional; a request may supply any
    subset and the remainder falls back to the process-wide defaults.
    """

    baseUrl: Optional[str] = Field(default=None, description="JIRA site URL, e.g. https://acme.atlassian.net")
    email: Optional[str] = Field(default=None, description="JIRA account email")
    apiToken: Optional[str] = Field(default=None, description="JIRA API token")

    @property
    def complete(self) -> bool:
        return bool(self.baseUrl and self.email and self.apiToken)

    def merged_over(self, defaults: "JiraCredentials") -> "JiraCredentials":
        """Return a copy where each blank field is taken from ``defaults``."""
        return JiraCredentials(
            baseUrl=self.baseUrl or defaults.baseUrl,
            email=self.email or defaults.email,
            apiToken=self.apiToken or defaults.apiToken,
        )

    def missing(self) -> List[str]:
        names = []
        if not self.baseUrl:
            names.append("baseUrl")
        if not self.email:
            names.append("email")
        if not self.apiToken:
            names.append("apiToken")
        return names


class Settings(BaseSettings):
    """
    PUBLIC_INTERFACE
    Application configuration loaded from environment variables using pydantic-settings.
    """

    # JIRA defaults (per-request jiraConfig overrides these)
    JIRA_BASE_URL: Optional[str] = Field(default=None, description="Base URL for JIRA REST API")
    JIRA_EMAIL: Optional[str] = Field(default=None, description="JIRA account email")
    JIRA_API_TOKEN: Optional[str] = Field(default=None, description="JIRA API token")
    JIRA_CLOUD_SITE: Optional[str] = Field(default=None, description="Cloud site key, e.g., yoursite")

    # JIRA client behavior
    JIRA_TIMEOUT_SECONDS: Optional[float] = Field(
        default=None, description="HTTP timeout for JIRA API calls (seconds); httpx default when unset"
    )
    JIRA_SEARCH_MAX_RESULTS: int = Field(default=100, ge=1, description="Default maxResults for JQL searches")

    # Mock data
    MOCK_MIN_TICKETS: int = Field(default=2, ge=1, description="Smallest number of synthesized tickets")
    MOCK_MAX_TICKETS: int = Field(default=8, ge=1, description="Largest number of synthesized tickets")

    # App config
    APP_ENV: str = Field(default="development", description="Application environment")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level, e.g., DEBUG, INFO, WARNING")
    APP_CORS_ORIGINS: Annotated[List[str] | None, NoDecode] = Field(
        default=None, description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("APP_CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @model_validator(mode="after")
    def _validate_mock_bounds(self) -> "Settings":
        if self.MOCK_MAX_TICKETS < self.MOCK_MIN_TICKETS:
            raise ValueError("MOCK_MAX_TICKETS must be greater than or equal to MOCK_MIN_TICKETS")
        return self

    @property
    def jira_base_url(self) -> Optional[str]:
        """Resolve base URL using JIRA_BASE_URL or JIRA_CLOUD_SITE."""
        if self.JIRA_BASE_URL:
            return self.JIRA_BASE_URL.rstrip("/")
        if self.JIRA_CLOUD_SITE:
            return f"https://{self.JIRA_CLOUD_SITE}.atlassian.net"
        return None

    def default_credentials(self) -> JiraCredentials:
        """
        PUBLIC_INTERFACE
        Build the default credential set once, at application start.
        """
        return JiraCredentials(
            baseUrl=self.jira_base_url,
            email=self.JIRA_EMAIL,
            apiToken=self.JIRA_API_TOKEN,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    PUBLIC_INTERFACE
    Returns a singleton settings instance loaded from environment variables.
    """
    return Settings()


def read_version() -> str:
    """Read version from the VERSION file at the project root, with fallback."""
    try:
        version_path = Path(__file__).resolve().parents[2] / "VERSION"
        return version_path.read_text(encoding="utf-8").strip() or DEFAULT_VERSION
    except OSError:
        return DEFAULT_VERSION
