"""
VPN Service Layer - VPS catalog

Read-only lookups over the vps table used by the countries browser:
countries -> servers of a country -> config strings of one server.
No caching: every webhook reads the current rows.

All functions are pure business logic - no aiogram imports or Telegram-specific types.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional

import database
from app.services.vpn.exceptions import VpsSyncError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VpsCountry:
    country: str
    country_emoji: str


@dataclass(frozen=True)
class VpsServer:
    internal_uuid: str
    nickname: Optional[str]
    country: str
    country_emoji: str

    @property
    def button_text(self) -> str:
        return self.nickname or f"VPS {self.internal_uuid[:8].upper()}"


@dataclass
class VpsConfig:
    nickname: Optional[str]
    config_list: List[str] = field(default_factory=list)


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


async def list_unique_vps_countries(conn: Optional[Any] = None) -> List[VpsCountry]:
    """Distinct (country, flag) pairs ordered by country."""
    async with database.connection(conn) as c:
        rows = await c.fetch(
            "SELECT DISTINCT country, country_emoji FROM vps ORDER BY country ASC, country_emoji ASC"
        )
    return [VpsCountry(country=row["country"], country_emoji=row["country_emoji"]) for row in rows]


async def list_vps_by_country(country: str, conn: Optional[Any] = None) -> List[VpsServer]:
    async with database.connection(conn) as c:
        rows = await c.fetch(
            """SELECT internal_uuid, nickname, country, country_emoji
               FROM vps
               WHERE country = $1
               ORDER BY nickname ASC NULLS LAST""",
            country,
        )
    return [
        VpsServer(
            internal_uuid=str(row["internal_uuid"]),
            nickname=row["nickname"],
            country=row["country"],
            country_emoji=row["country_emoji"],
        )
        for row in rows
    ]


async def get_vps_config(internal_uuid: str, conn: Optional[Any] = None) -> Optional[VpsConfig]:
    """None for an unknown (or malformed) uuid."""
    if not _is_uuid(internal_uuid):
        return None
    async with database.connection(conn) as c:
        row = await c.fetchrow(
            "SELECT nickname, config_list FROM vps WHERE internal_uuid = $1",
            uuid.UUID(str(internal_uuid)),
        )
    if row is None:
        return None
    return VpsConfig(nickname=row["nickname"], config_list=[str(item) for item in (row["config_list"] or [])])


async def update_vps_connections(domain: str, active_connections: int, conn: Optional[Any] = None) -> None:
    """
    Store the current connection count for the server with this domain.

    Raises:
        VpsSyncError: no vps row for the domain
    """
    async with database.connection(conn) as c:
        row = await c.fetchrow(
            """UPDATE vps
               SET number_of_connections = $2,
                   updated_at = NOW()
               WHERE domain = $1
               RETURNING domain""",
            domain,
            active_connections,
        )
    if row is None:
        raise VpsSyncError(f"VPS row not found for domain: {domain}")
    logger.info(f"VPS_CONNECTIONS_UPDATED [domain={domain}, connections={active_connections}]")
