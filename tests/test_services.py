"""
Tests for the Google OAuth and reviews services
"""
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from pydantic import ValidationError

from review_relay.core.config import Settings
from review_relay.core.exceptions import (
    ConfigurationError,
    ReviewsFetchError,
    TokenExchangeError,
    TokenRefreshError,
    UpstreamError,
)
from review_relay.services.oauth_service import OAuthService, require_refresh_token
from review_relay.services.reviews_service import ReviewsService


@pytest.fixture
def settings(monkeypatch):
    """Sample settings for testing, isolated from the host environment"""
    monkeypatch.delenv("GOOGLE_REFRESH_TOKEN", raising=False)
    return Settings(
        _env_file=None,
        GOOGLE_CLIENT_ID="test_client_id",
        GOOGLE_CLIENT_SECRET="test_client_secret",
        GOOGLE_REDIRECT_URI="http://localhost:8000/api/callback",
        YOUR_GOOGLE_ACCOUNT_ID="123",
        YOUR_GOOGLE_LOCATION_ID="456",
        FORCE_CONSENT_PROMPT=False,
    )


def client_for(response_or_handler):
    """AsyncClient whose every request gets the given response"""
    if callable(response_or_handler):
        handler = response_or_handler
    else:
        def handler(request):
            return response_or_handler
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSettings:
    """Test configuration behaviour"""
    
    def test_parent_resource(self, settings):
        """Test parent resource is built from account and location"""
        assert settings.parent_resource == "accounts/123/locations/456"
    
    def test_settings_are_immutable(self, settings):
        """Test settings cannot be mutated after load"""
        with pytest.raises(ValidationError):
            settings.GOOGLE_REFRESH_TOKEN = "changed"
    
    def test_refresh_token_optional(self, settings):
        """Test refresh token defaults to None when not configured"""
        assert settings.GOOGLE_REFRESH_TOKEN is None
    
    def test_refresh_token_read_from_environment(self, monkeypatch):
        """Test refresh token is loaded from the environment"""
        monkeypatch.setenv("GOOGLE_REFRESH_TOKEN", "1//from-env")
        assert Settings(_env_file=None).GOOGLE_REFRESH_TOKEN == "1//from-env"


class TestRequireRefreshToken:
    """Test the refresh token precondition"""
    
    def test_missing_raises_configuration_error(self, settings):
        """Test unset refresh token raises ConfigurationError"""
        with pytest.raises(ConfigurationError):
            require_refresh_token(settings)
    
    def test_empty_raises_configuration_error(self, settings):
        """Test empty refresh token raises ConfigurationError"""
        empty = settings.model_copy(update={"GOOGLE_REFRESH_TOKEN": ""})
        with pytest.raises(ConfigurationError):
            require_refresh_token(empty)
    
    def test_returns_configured_token(self, settings):
        """Test configured refresh token is returned"""
        configured = settings.model_copy(update={"GOOGLE_REFRESH_TOKEN": "1//stored"})
        assert require_refresh_token(configured) == "1//stored"


class TestAuthorizationUrl:
    """Test consent URL building"""
    
    def test_offline_access_and_scope(self, settings):
        """Test consent URL requests offline access and business scope"""
        url = OAuthService(settings, client_for(httpx.Response(200))).build_authorization_url()
        query = parse_qs(urlparse(url).query)
        
        assert query["access_type"] == ["offline"]
        assert query["response_type"] == ["code"]
        assert query["scope"] == [settings.GOOGLE_SCOPE]
        assert query["client_id"] == ["test_client_id"]
        assert "prompt" not in query
    
    def test_force_consent_prompt(self, settings):
        """Test consent prompt is added when forced"""
        forced = settings.model_copy(update={"FORCE_CONSENT_PROMPT": True})
        url = OAuthService(forced, client_for(httpx.Response(200))).build_authorization_url()
        
        assert parse_qs(urlparse(url).query)["prompt"] == ["consent"]


class TestCodeExchange:
    """Test authorization code exchange"""
    
    @pytest.mark.asyncio
    async def test_returns_token_pair(self, settings):
        """Test successful exchange returns the token pair"""
        response = httpx.Response(200, json={
            "access_token": "ya29.x",
            "refresh_token": "1//r",
            "expires_in": 3599,
            "scope": settings.GOOGLE_SCOPE,
            "token_type": "Bearer",
            "id_token": "ignored",
        })
        pair = await OAuthService(settings, client_for(response)).exchange_code_for_token("code")
        
        assert pair.access_token == "ya29.x"
        assert pair.refresh_token == "1//r"
    
    @pytest.mark.asyncio
    async def test_missing_refresh_token_is_not_an_error(self, settings):
        """Test exchange without refresh token still succeeds"""
        response = httpx.Response(200, json={"access_token": "ya29.x"})
        pair = await OAuthService(settings, client_for(response)).exchange_code_for_token("code")
        
        assert pair.refresh_token is None
    
    @pytest.mark.asyncio
    async def test_rejected_code(self, settings):
        """Test rejected code raises TokenExchangeError with Google's detail"""
        response = httpx.Response(400, json={"error": "invalid_grant", "error_description": "Malformed auth code."})
        
        with pytest.raises(TokenExchangeError) as exc_info:
            await OAuthService(settings, client_for(response)).exchange_code_for_token("code")
        
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "invalid_grant: Malformed auth code."
    
    @pytest.mark.asyncio
    async def test_non_json_body(self, settings):
        """Test non-JSON token response raises TokenExchangeError"""
        response = httpx.Response(200, content=b"<html>oops</html>")
        
        with pytest.raises(TokenExchangeError):
            await OAuthService(settings, client_for(response)).exchange_code_for_token("code")
    
    @pytest.mark.asyncio
    async def test_transport_error(self, settings):
        """Test timeouts raise TokenExchangeError"""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)
        
        with pytest.raises(TokenExchangeError):
            await OAuthService(settings, client_for(handler)).exchange_code_for_token("code")


class TestTokenRefresh:
    """Test access token minting"""
    
    @pytest.mark.asyncio
    async def test_returns_access_token(self, settings):
        """Test refresh returns the new access token"""
        seen = []
        
        def handler(request):
            seen.append(parse_qs(request.content.decode()))
            return httpx.Response(200, json={"access_token": "ya29.new", "expires_in": 3599})
        
        token = await OAuthService(settings, client_for(handler)).refresh_access_token("1//r")
        
        assert token == "ya29.new"
        assert seen[0]["refresh_token"] == ["1//r"]
        assert seen[0]["client_secret"] == ["test_client_secret"]
    
    @pytest.mark.asyncio
    async def test_response_without_access_token(self, settings):
        """Test refresh response without access token raises"""
        response = httpx.Response(200, json={"expires_in": 3599})
        
        with pytest.raises(TokenRefreshError):
            await OAuthService(settings, client_for(response)).refresh_access_token("1//r")
    
    @pytest.mark.asyncio
    async def test_revoked_refresh_token(self, settings):
        """Test revoked refresh token raises an upstream error"""
        response = httpx.Response(400, json={"error": "invalid_grant"})
        
        with pytest.raises(UpstreamError):
            await OAuthService(settings, client_for(response)).refresh_access_token("1//r")


class TestReviewsService:
    """Test reviews listing"""
    
    @pytest.mark.asyncio
    async def test_returns_raw_body(self, settings):
        """Test listing returns the raw upstream body"""
        body = b'{"reviews": [{"name": "r1"}],  "nextPageToken": "t"}'
        service = ReviewsService(settings, client_for(httpx.Response(200, content=body)))
        
        assert await service.list_reviews("ya29.x") == body
    
    @pytest.mark.asyncio
    async def test_error_status(self, settings):
        """Test non-2xx listing raises ReviewsFetchError"""
        service = ReviewsService(settings, client_for(httpx.Response(404, text="Requested entity was not found.")))
        
        with pytest.raises(ReviewsFetchError) as exc_info:
            await service.list_reviews("ya29.x")
        
        assert exc_info.value.status_code == 404
    
    def test_reviews_url(self, settings):
        """Test reviews URL targets the configured location"""
        service = ReviewsService(settings, client_for(httpx.Response(200)))
        assert service.reviews_url == "https://mybusiness.googleapis.com/v4/accounts/123/locations/456/reviews"
