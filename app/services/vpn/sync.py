"""
VPS connection-count sync.

Counts established TCP connections on the VPN ports over SSH and stores the
number in vps.number_of_connections for the configured domain. Runs on demand
(POST /api/vps/sync) and, when VPS_CONNECTION_SYNC_ENABLED, as a periodic
worker started from the application lifespan.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import config
import database
from app.services.vpn.exceptions import VpsSyncError
from app.services.vpn.service import update_vps_connections
from app.services.vpn.ssh import run_vps_ssh_command
from app.utils.logging_helpers import classify_error, log_worker_iteration_end, log_worker_iteration_start

logger = logging.getLogger(__name__)

DEFAULT_VPN_PORTS = [443, 8443]


@dataclass
class VpsConnectionsSyncResult:
    domain: str
    ports: List[int] = field(default_factory=list)
    active_connections: int = 0
    synced_at: str = ""

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "ports": list(self.ports),
            "active_connections": self.active_connections,
            "synced_at": self.synced_at,
        }


def get_sync_domain() -> str:
    if not config.VPS_SYNC_TARGET_DOMAIN:
        raise VpsSyncError("VPS_SYNC_TARGET_DOMAIN or VPS_DOMAIN must be configured.")
    return config.VPS_SYNC_TARGET_DOMAIN


def parse_sync_ports(raw: Optional[str]) -> List[int]:
    """ "443, 8443" -> [443, 8443]; invalid entries dropped, all invalid -> error"""
    if raw is None or not raw.strip():
        return list(DEFAULT_VPN_PORTS)

    ports = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk.isdigit():
            continue
        port = int(chunk)
        if 0 < port <= 65535:
            ports.append(port)

    if not ports:
        raise VpsSyncError("VPS_SYNC_PORTS is configured but contains no valid ports.")
    return ports


def build_connection_count_command(ports: List[int]) -> str:
    ss_ports_clause = " or ".join(f"sport = :{port}" for port in ports)
    return (
        "if command -v ss >/dev/null 2>&1; then "
        f"ss -Htan state established '( {ss_ports_clause} )' | wc -l; "
        "else "
        "netstat -tan 2>/dev/null | awk '$6 == \"ESTABLISHED\"' | wc -l; "
        "fi"
    )


def parse_connection_count(stdout: str) -> int:
    raw = (stdout or "").strip()
    try:
        value = int(raw.split()[0]) if raw else -1
    except ValueError:
        value = -1
    if value < 0:
        raise VpsSyncError(f"Failed to parse active connections count from VPS output: {raw}")
    return value


async def sync_vps_current_connections() -> VpsConnectionsSyncResult:
    """
    Raises:
        VpsSyncError / VpsSshConfigError / VpsSshError
    """
    domain = get_sync_domain()
    ports = parse_sync_ports(config.VPS_SYNC_PORTS)
    ssh_result = await run_vps_ssh_command(build_connection_count_command(ports))
    active_connections = parse_connection_count(ssh_result.stdout)

    await update_vps_connections(domain, active_connections)

    return VpsConnectionsSyncResult(
        domain=domain,
        ports=ports,
        active_connections=active_connections,
        synced_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


async def vps_connections_sync_task(interval_seconds: Optional[int] = None) -> None:
    """
    Periodic worker: sync once at startup, then every interval.
    Never crashes - every iteration failure is logged and the loop continues.
    """
    interval = interval_seconds or config.VPS_CONNECTION_SYNC_INTERVAL_SECONDS
    logger.info(f"VPS_SYNC_WORKER_STARTED [interval={interval}s]")

    iteration = 0
    while True:
        iteration += 1
        log_worker_iteration_start(worker_name="vps_sync", iteration_number=iteration)
        started = time.monotonic()
        try:
            if not database.DB_READY:
                log_worker_iteration_end(worker_name="vps_sync", outcome="skipped", reason="db_not_ready")
            else:
                result = await sync_vps_current_connections()
                log_worker_iteration_end(
                    worker_name="vps_sync",
                    outcome="success",
                    duration_ms=(time.monotonic() - started) * 1000,
                    domain=result.domain,
                    active_connections=result.active_connections,
                )
        except asyncio.CancelledError:
            logger.info("vps_sync_worker cancelled")
            break
        except Exception as e:
            logger.error(f"vps_sync_worker error={type(e).__name__}: {e}")
            log_worker_iteration_end(
                worker_name="vps_sync",
                outcome="failed",
                error_type=classify_error(e),
                duration_ms=(time.monotonic() - started) * 1000,
            )

        await asyncio.sleep(interval)
