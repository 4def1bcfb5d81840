"""
VPN Service Layer

VPS catalog lookups, SSH runner and connection-count sync.
"""

from app.services.vpn.service import (
    list_unique_vps_countries,
    list_vps_by_country,
    get_vps_config,
    update_vps_connections,
    VpsCountry,
    VpsServer,
    VpsConfig,
)

from app.services.vpn.exceptions import (
    VPNServiceError,
    VpsSshConfigError,
    VpsSshError,
    VpsSyncError,
)

__all__ = [
    "list_unique_vps_countries",
    "list_vps_by_country",
    "get_vps_config",
    "update_vps_connections",
    "VpsCountry",
    "VpsServer",
    "VpsConfig",
    "VPNServiceError",
    "VpsSshConfigError",
    "VpsSshError",
    "VpsSyncError",
]
