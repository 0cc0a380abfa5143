"""Serverless entry point: the platform serves the ASGI ``app`` found here at /api/jira."""
from jira_gateway.main import app  # noqa: F401
