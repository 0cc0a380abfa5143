from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from jira_gateway.core.config import read_version
from jira_gateway.models.jira import GatewayRequest
from jira_gateway.models.schemas import ErrorResponse, StatusResponse
from jira_gateway.services.router import GatewayRouter

GATEWAY_PATH = "/api/jira"

router = APIRouter(prefix="", tags=["jira"])


def get_gateway_router(request: Request) -> GatewayRouter:
    """Dependency provider for the GatewayRouter built at application start."""
    return request.app.state.gateway_router


@router.get(
    GATEWAY_PATH,
    summary="Gateway status",
    description="Static liveness payload for the action endpoint.",
    response_model=StatusResponse,
)
# PUBLIC_INTERFACE
def gateway_status() -> StatusResponse:
    """Liveness probe on the action endpoint itself."""
    return StatusResponse(status="healthy", version=read_version(), message="WSJF JIRA API is running")


@router.post(
    GATEWAY_PATH,
    summary="Run a gateway action",
    description=(
        "Dispatch fetchByKeys, fetchByJQL, updateFields, testConnection, getFields, getProjects or "
        "getSprints against JIRA. Always 200: when JIRA is not configured or fails, synthesized "
        "issues are returned with mock=true."
    ),
    responses={400: {"model": ErrorResponse}, 405: {"model": ErrorResponse}},
)
# PUBLIC_INTERFACE
async def gateway_action(
    request: Request,
    payload: GatewayRequest,
    gateway: GatewayRouter = Depends(get_gateway_router),
) -> Dict[str, Any]:
    """Run one action and return the response envelope."""
    response = await gateway.handle(payload, request_id=getattr(request.state, "request_id", None))
    return response.to_body()
