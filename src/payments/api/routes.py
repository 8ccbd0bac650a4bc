"""FastAPI routes for the Payments domain: gateway controls for manual testing."""

from fastapi import APIRouter, HTTPException, Request

from payments.api.schemas import ConfigureGatewayRequest, GatewayConfigResponse
from payments.gateway.fake_adapter import FakeGateway

# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
def configure_gateway(body: ConfigureGatewayRequest, request: Request) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when STOREFRONT_ENV is not 'production'.
    It allows toggling settlement success/failure for manual API testing.
    """
    if request.app.state.settings.is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = request.app.state.scheduler.gateway
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )
