"""
VPN Service Domain Exceptions
"""


class VPNServiceError(Exception):
    """Base exception for VPS catalog / SSH errors"""
    pass


class VpsSshConfigError(VPNServiceError):
    """VPS_SSH_* settings are missing or invalid"""
    pass


class VpsSshError(VPNServiceError):
    """Remote command could not be executed"""
    pass


class VpsSyncError(VPNServiceError):
    """Connection-count sync failed (bad settings, unparsable output, unknown domain)"""
    pass
