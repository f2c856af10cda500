"""
API Routes for Review Relay
"""
import html
from datetime import datetime
from typing import Dict

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response

from ..core.config import Settings, get_settings
from ..core.exceptions import ConfigurationError, UpstreamError
from ..core.http import get_http_client
from ..core.logging import get_logger
from ..models.schemas import ErrorResponse, HealthCheckResponse
from ..services.oauth_service import OAuthService, require_refresh_token
from ..services.reviews_service import ReviewsService

logger = get_logger(__name__)

router = APIRouter()

MISSING_CONFIG_MESSAGE = "Refresh Token not configured on the server."
FETCH_FAILED_MESSAGE = "Failed to fetch Google Reviews."
EXCHANGE_FAILED_MESSAGE = "Failed to exchange authorization code for tokens."
NO_REFRESH_TOKEN_MESSAGE = (
    "Refresh token was not provided by Google. Did you already authorize this app? "
    "Try removing access in your Google account settings and re-authorizing."
)

CALLBACK_SUCCESS_PAGE = """
<h1>Authorization Successful!</h1>
<p>Your Refresh Token is:</p>
<pre style="font-size: 1.2em; background-color: #eee; padding: 20px; border-radius: 5px; word-wrap: break-word;">{refresh_token}</pre>
<p><b>ACTION REQUIRED:</b> Copy this token and add it to your environment variables as <code>GOOGLE_REFRESH_TOKEN</code>, then restart the service. You can now close this window.</p>
"""


# ========== Dependencies ==========

def get_oauth_service(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> OAuthService:
    return OAuthService(settings, http_client)


def get_reviews_service(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> ReviewsService:
    return ReviewsService(settings, http_client)


def cors_headers(request: Request, settings: Settings) -> Dict[str, str]:
    """Cross-origin headers for the reviews endpoint"""
    if "*" in settings.ALLOWED_ORIGINS:
        return {"Access-Control-Allow-Origin": "*"}
    
    origin = request.headers.get("origin")
    if origin and origin in settings.ALLOWED_ORIGINS:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {"Vary": "Origin"}


# ========== Health Check ==========

@router.get("/health", response_model=HealthCheckResponse, tags=["General"])
def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint; never calls Google"""
    return HealthCheckResponse(
        status="healthy",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow(),
        refresh_token_configured=bool(settings.GOOGLE_REFRESH_TOKEN),
    )


# ========== Reviews ==========

@router.get(
    "/api/reviews",
    tags=["Reviews"],
    responses={500: {"model": ErrorResponse}},
)
async def get_reviews(
    request: Request,
    settings: Settings = Depends(get_settings),
    oauth: OAuthService = Depends(get_oauth_service),
    reviews: ReviewsService = Depends(get_reviews_service),
):
    """
    Storefront endpoint returning the newest Google reviews
    
    The upstream payload is returned byte-for-byte. Account and location
    come from configuration only.
    """
    headers = cors_headers(request, settings)
    
    try:
        refresh_token = require_refresh_token(settings)
    except ConfigurationError as e:
        logger.error(f"Reviews requested without configuration: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=MISSING_CONFIG_MESSAGE).model_dump(),
            headers=headers,
        )
    
    try:
        access_token = await oauth.refresh_access_token(refresh_token)
        body = await reviews.list_reviews(access_token)
    except UpstreamError as e:
        logger.error(f"Error fetching reviews: {e}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=FETCH_FAILED_MESSAGE).model_dump(),
            headers=headers,
        )
    
    return Response(content=body, status_code=200, media_type="application/json", headers=headers)


# ========== OAuth Flow ==========

@router.get("/api/authorize", tags=["OAuth"])
def authorize(oauth: OAuthService = Depends(get_oauth_service)):
    """
    One-time browser endpoint starting the OAuth flow
    
    Redirects directly to Google OAuth consent screen.
    """
    auth_url = oauth.build_authorization_url()
    logger.info("Redirecting operator to Google consent screen")
    return RedirectResponse(auth_url, status_code=302)


@router.get("/api/callback", tags=["OAuth"], response_class=HTMLResponse)
async def oauth_callback(request: Request, oauth: OAuthService = Depends(get_oauth_service)):
    """
    OAuth callback endpoint
    
    Google redirects here after user authorization. The refresh token is
    shown once for the operator to copy; it is never stored by the relay.
    """
    code = request.query_params.get("code")
    error = request.query_params.get("error")
    
    # Check for Google OAuth errors
    if error:
        logger.error(f"OAuth error from Google: {error}")
        return PlainTextResponse(f"Google OAuth error: {error}", status_code=400)
    
    if not code:
        return PlainTextResponse("Missing code parameter", status_code=400)
    
    try:
        token_pair = await oauth.exchange_code_for_token(code)
    except UpstreamError as e:
        logger.error(f"OAuth callback failed: {e}")
        message = EXCHANGE_FAILED_MESSAGE
        if e.detail:
            message = f"{message} {e.detail}"
        return PlainTextResponse(message, status_code=500)
    
    if not token_pair.refresh_token:
        logger.warning("Code exchange succeeded but Google issued no refresh token")
        return PlainTextResponse(NO_REFRESH_TOKEN_MESSAGE, status_code=500)
    
    logger.info("OAuth callback successful, refresh token issued")
    return HTMLResponse(CALLBACK_SUCCESS_PAGE.format(refresh_token=html.escape(token_pair.refresh_token)))
