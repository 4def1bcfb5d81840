"""
Admin VPS endpoints: SSH smoke test and on-demand connection count sync.
"""
import logging

from fastapi import APIRouter, Depends

import config
from app.api.dependencies import ApiError, require_admin_secret
from app.services.vpn.ssh import run_vps_ssh_command
from app.services.vpn.sync import sync_vps_current_connections

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/vps", dependencies=[Depends(require_admin_secret)])


@router.get("/ssh/test")
async def test_vps_ssh_connection():
    try:
        hostname = await run_vps_ssh_command("hostname")
        whoami = await run_vps_ssh_command("whoami")
    except Exception as e:
        logger.error(f"VPS_SSH_TEST_FAILED [error={type(e).__name__}: {e}]")
        raise ApiError(500, "VPS SSH connection failed.", error=str(e) or "Unknown SSH error.")

    return {
        "ok": True,
        "data": {
            "host": config.VPS_SSH_HOST or None,
            "hostname": hostname.stdout.strip(),
            "user": whoami.stdout.strip(),
        },
    }


@router.post("/sync")
async def sync_vps_connections():
    try:
        result = await sync_vps_current_connections()
    except Exception as e:
        logger.error(f"VPS_SYNC_REQUEST_FAILED [error={type(e).__name__}: {e}]")
        raise ApiError(500, "VPS connections sync failed.", error=str(e) or "Unknown sync error.")

    logger.info(f"VPS_SYNC_REQUEST_DONE [domain={result.domain}, active={result.active_connections}]")
    return {"ok": True, "data": result.to_dict()}
