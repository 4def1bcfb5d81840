"""
SSH command runner for the VPS host (paramiko).

paramiko is blocking, so every call runs in the default executor. One
connection per command: the callers are an admin endpoint and an hourly sync.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

import paramiko

import config
from app.services.vpn.exceptions import VpsSshConfigError, VpsSshError

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 1024 * 1024


@dataclass(frozen=True)
class VpsSshSettings:
    host: str
    user: str
    port: int
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    timeout: float = 20.0


@dataclass(frozen=True)
class SshCommandResult:
    stdout: str
    stderr: str
    exit_status: int


def parse_ssh_port(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return 22
    try:
        port = int(raw.strip())
    except ValueError:
        raise VpsSshConfigError("VPS_SSH_PORT is invalid.")
    if port <= 0 or port > 65535:
        raise VpsSshConfigError("VPS_SSH_PORT is invalid.")
    return port


def load_ssh_settings() -> VpsSshSettings:
    """
    Raises:
        VpsSshConfigError: host/user missing, port invalid, key file unreadable
    """
    if not config.VPS_SSH_HOST:
        raise VpsSshConfigError("VPS_SSH_HOST is not configured.")
    if not config.VPS_SSH_USER:
        raise VpsSshConfigError("VPS_SSH_USER is not configured.")

    key_path = config.VPS_SSH_PRIVATE_KEY_PATH or None
    if key_path is not None and not os.access(key_path, os.R_OK):
        raise VpsSshConfigError("VPS_SSH_PRIVATE_KEY_PATH is not readable.")

    return VpsSshSettings(
        host=config.VPS_SSH_HOST,
        user=config.VPS_SSH_USER,
        port=parse_ssh_port(config.VPS_SSH_PORT),
        password=config.VPS_SSH_PASSWORD or None,
        private_key_path=key_path,
        timeout=config.VPS_SSH_TIMEOUT,
    )


def _run_command_blocking(settings: VpsSshSettings, command: str) -> SshCommandResult:
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    try:
        client.connect(
            hostname=settings.host,
            port=settings.port,
            username=settings.user,
            password=settings.password,
            key_filename=settings.private_key_path,
            timeout=settings.timeout,
            banner_timeout=settings.timeout,
            auth_timeout=settings.timeout,
            look_for_keys=False,
            allow_agent=False,
        )
        _, stdout, stderr = client.exec_command(command, timeout=settings.timeout)
        out = stdout.read(MAX_OUTPUT_BYTES).decode("utf-8", errors="ignore")
        err = stderr.read(MAX_OUTPUT_BYTES).decode("utf-8", errors="ignore")
        exit_status = stdout.channel.recv_exit_status()
        return SshCommandResult(stdout=out, stderr=err, exit_status=exit_status)
    finally:
        client.close()


async def run_vps_ssh_command(command: str, settings: Optional[VpsSshSettings] = None) -> SshCommandResult:
    """
    Run one shell command on the VPS host.

    Raises:
        VpsSshConfigError: settings missing/invalid
        VpsSshError: connection, auth or execution failure
    """
    if not command or not command.strip():
        raise ValueError("SSH command cannot be empty.")
    settings = settings or load_ssh_settings()

    try:
        result = await asyncio.get_running_loop().run_in_executor(
            None, _run_command_blocking, settings, command
        )
    except (paramiko.SSHException, OSError) as e:
        logger.error(f"VPS_SSH_COMMAND_FAILED [host={settings.host}, error={type(e).__name__}: {e}]")
        raise VpsSshError(f"SSH command failed on {settings.host}: {e}") from e

    if result.stderr.strip():
        logger.warning(f"VPS_SSH_STDERR [host={settings.host}, exit_status={result.exit_status}]")
    return result
