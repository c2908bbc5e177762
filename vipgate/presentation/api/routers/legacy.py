"""Paths used by client builds that predate the /api routes."""

from fastapi import APIRouter, Depends

from ...api.dependencies import require_admin, require_admin_or_device
from . import admin, client

router = APIRouter(tags=["Legacy Paths"], include_in_schema=False)

router.add_api_route(
    "/create.php", admin.create_account, methods=["POST"], dependencies=[Depends(require_admin)]
)
router.add_api_route(
    "/edit.php", admin.renew_account, methods=["POST"], dependencies=[Depends(require_admin)]
)
router.add_api_route(
    "/delete.php",
    admin.delete_account,
    methods=["POST"],
    dependencies=[Depends(require_admin_or_device)],
)
router.add_api_route(
    "/list.php",
    admin.list_accounts,
    methods=["GET", "POST"],
    dependencies=[Depends(require_admin)],
)
router.add_api_route("/login.php", client.login, methods=["POST"])
router.add_api_route("/user_exist.php", client.check_exists, methods=["POST"])
router.add_api_route("/reupload.php", client.reactivate, methods=["POST"])
