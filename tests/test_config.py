import pytest
from pydantic import ValidationError

from jira_gateway.core.config import JiraCredentials, Settings


def test_cloud_site_builds_base_url():
    settings = Settings(_env_file=None, JIRA_BASE_URL=None, JIRA_CLOUD_SITE="acme")
    assert settings.jira_base_url == "https://acme.atlassian.net"


def test_base_url_wins_and_is_trimmed():
    settings = Settings(_env_file=None, JIRA_BASE_URL="https://jira.acme.io/", JIRA_CLOUD_SITE="acme")
    assert settings.default_credentials().baseUrl == "https://jira.acme.io"


def test_cors_origins_from_env(monkeypatch):
    monkeypatch.setenv("APP_CORS_ORIGINS", "https://a.example.com, https://b.example.com")
    settings = Settings(_env_file=None)
    assert settings.APP_CORS_ORIGINS == ["https://a.example.com", "https://b.example.com"]


def test_mock_bounds_validated():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, MOCK_MIN_TICKETS=5, MOCK_MAX_TICKETS=2)


def test_credentials_missing_fields():
    creds = JiraCredentials(baseUrl="https://x.atlassian.net", apiToken="")
    assert creds.complete is False
    assert creds.missing() == ["email", "apiToken"]
