"""
OAuth Service - Handles Google OAuth consent URL, code exchange and token refresh
"""
import urllib.parse
from typing import Dict

import httpx
from pydantic import ValidationError

from ..core.config import Settings
from ..core.exceptions import ConfigurationError, TokenExchangeError, TokenRefreshError
from ..core.logging import get_logger
from ..models.schemas import TokenPair

logger = get_logger(__name__)


def require_refresh_token(settings: Settings) -> str:
    """Return the configured refresh token or raise ConfigurationError"""
    if not settings.GOOGLE_REFRESH_TOKEN:
        raise ConfigurationError("GOOGLE_REFRESH_TOKEN is not configured")
    return settings.GOOGLE_REFRESH_TOKEN


def _google_error_detail(response: httpx.Response) -> str:
    """Pull Google's error/error_description out of a failed token response"""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if not isinstance(body, dict):
        return str(body)[:200]
    error = body.get("error", "")
    description = body.get("error_description", "")
    return f"{error}: {description}" if description else str(error)


class OAuthService:
    """Service for Google OAuth operations
    
    Holds only the immutable settings and the HTTP client; the refresh token is
    passed per call, so one instance never carries credentials between requests.
    """
    
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client
    
    def build_authorization_url(self) -> str:
        """
        Build the Google consent screen URL
        
        Requests offline access so the exchange yields a refresh token.
        Missing client credentials are passed through as-is.
        """
        params = {
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
            "response_type": "code",
            "scope": self.settings.GOOGLE_SCOPE,
            "access_type": "offline",
        }
        if self.settings.FORCE_CONSENT_PROMPT:
            params["prompt"] = "consent"
        
        return f"{self.settings.GOOGLE_AUTH_URL}?{urllib.parse.urlencode(params)}"
    
    async def _post_token(self, payload: Dict[str, str]) -> httpx.Response:
        return await self.http_client.post(self.settings.GOOGLE_TOKEN_URL, data=payload)
    
    async def exchange_code_for_token(self, code: str) -> TokenPair:
        """
        Exchange authorization code for access and refresh tokens
        
        Args:
            code: Authorization code from Google
            
        Returns:
            Token pair; refresh_token is None when Google did not issue one
            
        Raises:
            TokenExchangeError: If the exchange fails
        """
        payload = {
            "code": code,
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
            "redirect_uri": self.settings.GOOGLE_REDIRECT_URI,
            "grant_type": "authorization_code",
        }
        
        logger.info(f"Exchanging authorization code for tokens (client_id: {self.settings.GOOGLE_CLIENT_ID[:20]}...)")
        
        try:
            response = await self._post_token(payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to exchange code for token: {str(e)}")
            raise TokenExchangeError("Token endpoint unreachable", detail=str(e)) from e
        
        if response.is_error:
            detail = _google_error_detail(response)
            logger.error(f"Google rejected code exchange: {response.status_code} {detail}")
            raise TokenExchangeError("Google rejected the authorization code", response.status_code, detail)
        
        try:
            token_pair = TokenPair.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected token response: {str(e)}")
            raise TokenExchangeError("Unexpected token response from Google", response.status_code) from e
        
        logger.info("Successfully exchanged code for tokens")
        return token_pair
    
    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Mint a short-lived access token from a refresh token
        
        Raises:
            TokenRefreshError: If the refresh fails
        """
        payload = {
            "refresh_token": refresh_token,
            "client_id": self.settings.GOOGLE_CLIENT_ID,
            "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
            "grant_type": "refresh_token",
        }
        
        logger.info(f"Refreshing access token (client_id: {self.settings.GOOGLE_CLIENT_ID[:20]}...)")
        
        try:
            response = await self._post_token(payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to refresh token: {str(e)}")
            raise TokenRefreshError("Token endpoint unreachable", detail=str(e)) from e
        
        if response.is_error:
            detail = _google_error_detail(response)
            logger.error(f"Google rejected token refresh: {response.status_code} {detail}")
            raise TokenRefreshError("Google rejected the refresh token", response.status_code, detail)
        
        try:
            access_token = response.json().get("access_token")
        except (ValueError, AttributeError) as e:
            raise TokenRefreshError("Unexpected token response from Google", response.status_code) from e
        
        if not access_token:
            raise TokenRefreshError("Token response did not contain an access token", response.status_code)
        
        logger.info("Successfully refreshed access token")
        return access_token
