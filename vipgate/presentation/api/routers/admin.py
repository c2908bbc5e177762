from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from ....application.services.entitlement_service import EntitlementService
from ....core.dependencies import get_entitlement_service
from ....domain.models import UserAccount
from ...api.body import parse_payload, read_payload
from ...api.dependencies import require_admin, require_admin_or_device
from ...api.schemas.account_schemas import (
    AccountLookupRequest,
    CreateAccountRequest,
    DeleteAccountRequest,
    ListAccountsRequest,
    RenewAccountRequest,
)

router = APIRouter(prefix="/api/admin", tags=["Account Administration"])


@router.post("/users/create", dependencies=[Depends(require_admin)])
async def create_account(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(CreateAccountRequest, await read_payload(request))
    account = await run_in_threadpool(
        service.create, payload.username, payload.password, payload.days
    )
    return _serialize_account(account)


@router.post("/users/renew", dependencies=[Depends(require_admin)])
async def renew_account(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(RenewAccountRequest, await read_payload(request))
    account = await run_in_threadpool(service.renew, payload.username, payload.extra_days)
    return _serialize_account(account)


@router.post("/users/delete", dependencies=[Depends(require_admin_or_device)])
async def delete_account(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(DeleteAccountRequest, await read_payload(request))
    removed = await run_in_threadpool(service.delete, payload.username)
    return {"status": "ok", "username": payload.username, "deleted": removed}


@router.api_route("/users", methods=["GET", "POST"], dependencies=[Depends(require_admin)])
async def list_accounts(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(ListAccountsRequest, await read_payload(request))
    if payload.cursor is None and payload.limit is None:
        summaries = await run_in_threadpool(lambda: list(service.list_accounts()))
        return {"status": "ok", "users": [item.to_payload() for item in summaries]}
    summaries, cursor = await run_in_threadpool(service.list_page, payload.cursor, payload.limit)
    return {
        "status": "ok",
        "users": [item.to_payload() for item in summaries],
        "cursor": cursor,
    }


@router.post("/users/reset-device", dependencies=[Depends(require_admin)])
async def reset_device(
    request: Request,
    service: EntitlementService = Depends(get_entitlement_service),
) -> Dict[str, Any]:
    payload = parse_payload(AccountLookupRequest, await read_payload(request))
    account = await run_in_threadpool(service.reset_device, payload.username)
    return {"status": "ok", "username": account.username}


def _serialize_account(account: UserAccount) -> Dict[str, Any]:
    return {
        "status": "ok",
        "username": account.username,
        "expiresAt": account.expires_at,
        "trialDays": account.trial_days,
    }
