"""
User ledger exceptions.
"""


class UserServiceError(Exception):
    """Base exception for user ledger errors"""
    pass


class UserNotFoundError(UserServiceError):
    """Raised when a row that must exist has disappeared"""
    pass
