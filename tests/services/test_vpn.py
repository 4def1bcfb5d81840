"""
Unit tests for the VPS catalog, SSH settings and connection-count sync.
"""
import asyncio
from unittest.mock import AsyncMock, patch

import paramiko
import pytest

import config
import database
from app.services.vpn.exceptions import VpsSshConfigError, VpsSshError, VpsSyncError
from app.services.vpn.service import (
    VpsServer,
    get_vps_config,
    list_unique_vps_countries,
    update_vps_connections,
)
from app.services.vpn.ssh import (
    SshCommandResult,
    VpsSshSettings,
    load_ssh_settings,
    parse_ssh_port,
    run_vps_ssh_command,
)
from app.services.vpn.sync import (
    build_connection_count_command,
    parse_connection_count,
    parse_sync_ports,
    sync_vps_current_connections,
    vps_connections_sync_task,
)

VPS_UUID = "0b9c5a0e-6f7e-4d43-9b0c-0f2b5e7b6a11"


class TestCatalog:
    def test_button_text_fallback(self):
        assert VpsServer(VPS_UUID, None, "NL", "🇳🇱").button_text == "VPS 0B9C5A0E"
        assert VpsServer(VPS_UUID, "Amsterdam-1", "NL", "🇳🇱").button_text == "Amsterdam-1"

    @pytest.mark.asyncio
    async def test_countries(self, fake_conn):
        fake_conn.fetch.return_value = [{"country": "Netherlands", "country_emoji": "🇳🇱"}]
        countries = await list_unique_vps_countries()
        assert countries[0].country == "Netherlands"

    @pytest.mark.asyncio
    async def test_config_for_malformed_uuid(self, fake_conn):
        assert await get_vps_config("not-a-uuid") is None
        fake_conn.fetchrow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_config_list(self, fake_conn):
        fake_conn.fetchrow.return_value = {"nickname": "NL-1", "config_list": ["vless://a", "vless://b"]}
        vps_config = await get_vps_config(VPS_UUID)
        assert vps_config.config_list == ["vless://a", "vless://b"]

    @pytest.mark.asyncio
    async def test_update_connections_unknown_domain(self, fake_conn):
        fake_conn.fetchrow.return_value = None
        with pytest.raises(VpsSyncError):
            await update_vps_connections("vpn.example.com", 5)


class TestSshSettings:
    def test_parse_port(self):
        assert parse_ssh_port(None) == 22
        assert parse_ssh_port(" 2222 ") == 2222
        for raw in ("0", "70000", "ssh"):
            with pytest.raises(VpsSshConfigError):
                parse_ssh_port(raw)

    def test_host_required(self, monkeypatch):
        monkeypatch.setattr(config, "VPS_SSH_HOST", "")
        with pytest.raises(VpsSshConfigError, match="VPS_SSH_HOST"):
            load_ssh_settings()

    def test_user_required(self, monkeypatch):
        monkeypatch.setattr(config, "VPS_SSH_HOST", "10.0.0.1")
        monkeypatch.setattr(config, "VPS_SSH_USER", "")
        with pytest.raises(VpsSshConfigError, match="VPS_SSH_USER"):
            load_ssh_settings()

    def test_unreadable_key(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config, "VPS_SSH_HOST", "10.0.0.1")
        monkeypatch.setattr(config, "VPS_SSH_USER", "root")
        monkeypatch.setattr(config, "VPS_SSH_PRIVATE_KEY_PATH", str(tmp_path / "missing_key"))
        with pytest.raises(VpsSshConfigError, match="not readable"):
            load_ssh_settings()

    @pytest.mark.asyncio
    async def test_empty_command(self):
        with pytest.raises(ValueError):
            await run_vps_ssh_command("  ")

    @pytest.mark.asyncio
    async def test_ssh_failure_wrapped(self):
        settings = VpsSshSettings(host="10.0.0.1", user="root", port=22)
        with patch("app.services.vpn.ssh._run_command_blocking", side_effect=paramiko.SSHException("auth")):
            with pytest.raises(VpsSshError):
                await run_vps_ssh_command("hostname", settings=settings)


class TestSync:
    def test_parse_ports(self):
        assert parse_sync_ports(None) == [443, 8443]
        assert parse_sync_ports("") == [443, 8443]
        assert parse_sync_ports("443, abc, 99999, 2053") == [443, 2053]
        with pytest.raises(VpsSyncError):
            parse_sync_ports("abc,0")

    def test_command_filters_ports(self):
        command = build_connection_count_command([443, 8443])
        assert "( sport = :443 or sport = :8443 )" in command
        assert "netstat" in command

    def test_parse_count(self):
        assert parse_connection_count("42\n") == 42
        assert parse_connection_count("  7  extra") == 7
        for raw in ("", "abc", "-1"):
            with pytest.raises(VpsSyncError):
                parse_connection_count(raw)

    @pytest.mark.asyncio
    async def test_sync_updates_row(self, monkeypatch):
        monkeypatch.setattr(config, "VPS_SYNC_TARGET_DOMAIN", "vpn.example.com")
        monkeypatch.setattr(config, "VPS_SYNC_PORTS", "443")
        with patch("app.services.vpn.sync.run_vps_ssh_command",
                   AsyncMock(return_value=SshCommandResult(stdout="12\n", stderr="", exit_status=0))), \
             patch("app.services.vpn.sync.update_vps_connections", AsyncMock()) as update:
            result = await sync_vps_current_connections()

        update.assert_awaited_once_with("vpn.example.com", 12)
        assert result.to_dict()["active_connections"] == 12
        assert result.ports == [443]

    @pytest.mark.asyncio
    async def test_sync_requires_domain(self, monkeypatch):
        monkeypatch.setattr(config, "VPS_SYNC_TARGET_DOMAIN", "")
        with pytest.raises(VpsSyncError):
            await sync_vps_current_connections()


class TestSyncWorker:
    @pytest.mark.asyncio
    async def test_failed_iteration_does_not_stop_loop(self, monkeypatch):
        monkeypatch.setattr(database, "DB_READY", True)
        sleeps = AsyncMock(side_effect=[None, asyncio.CancelledError()])
        with patch("app.services.vpn.sync.sync_vps_current_connections",
                   AsyncMock(side_effect=[VpsSyncError("ssh down"), VpsSyncError("ssh down")])) as sync, \
             patch("app.services.vpn.sync.asyncio.sleep", sleeps):
            with pytest.raises(asyncio.CancelledError):
                await vps_connections_sync_task(interval_seconds=60)

        assert sync.await_count == 2
        sleeps.assert_awaited_with(60)
