from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from ....application.services.entitlement_service import EntitlementService
from ....core.dependencies import get_entitlement_service
from ....domain.errors import NotFound
from ...api.body import parse_payload, read_payload
from ...api.schemas.account_schemas import AccountLookupRequest, LoginRequest, ReactivateRequest

router = APIRouter(prefix="/api/client", tags=["Client Access"])


@router.post("/login")
async def login(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    """Authenticate a client; failures are reported with HTTP 200 and status "fail"."""
    payload = parse_payload(LoginRequest, await read_payload(request))
    result = await run_in_threadpool(
        service.login, payload.username, payload.password, payload.device_id
    )
    return result.to_payload()


@router.post("/exists")
async def check_exists(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(AccountLookupRequest, await read_payload(request))
    try:
        account_status = await run_in_threadpool(service.check_exists, payload.username)
    except NotFound as exc:
        return {"status": "fail", "message": exc.message}
    return account_status.to_payload()


@router.post("/reactivate")
async def reactivate(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(ReactivateRequest, await read_payload(request))
    account = await run_in_threadpool(
        service.reactivate, payload.username, payload.device_id, payload.expiry_millis
    )
    return {"status": "ok", "username": account.username, "expiresAt": account.expires_at}
