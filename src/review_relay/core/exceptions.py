"""
Error kinds raised by Review Relay services
"""
from typing import Optional


class RelayError(Exception):
    """Base error for the relay"""


class ConfigurationError(RelayError):
    """A required setting is missing"""


class UpstreamError(RelayError):
    """Google could not be reached or answered with an error"""
    
    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
    
    def __str__(self) -> str:
        parts = [self.args[0]]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.detail:
            parts.append(f"detail={self.detail}")
        return " ".join(parts)


class TokenExchangeError(UpstreamError):
    """Authorization code could not be exchanged for tokens"""


class TokenRefreshError(UpstreamError):
    """Access token could not be minted from the refresh token"""


class ReviewsFetchError(UpstreamError):
    """Reviews listing call failed"""
