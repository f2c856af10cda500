"""
Reviews Service - Lists Business Profile reviews for the configured location
"""
import httpx

from ..core.config import Settings
from ..core.exceptions import ReviewsFetchError
from ..core.logging import get_logger

logger = get_logger(__name__)


class ReviewsService:
    """Thin client for the Business Profile reviews.list call"""
    
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.http_client = http_client
    
    @property
    def reviews_url(self) -> str:
        return f"{self.settings.GOOGLE_REVIEWS_API_URL}/{self.settings.parent_resource}/reviews"
    
    async def list_reviews(self, access_token: str) -> bytes:
        """
        Fetch the newest reviews
        
        Returns the upstream body untouched; the relay owns no schema for it.
        
        Raises:
            ReviewsFetchError: On transport errors or non-2xx responses
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        params = {
            "pageSize": self.settings.REVIEWS_PAGE_SIZE,
            "orderBy": self.settings.REVIEWS_ORDER_BY,
        }
        
        logger.info(f"Fetching reviews for {self.settings.parent_resource}")
        
        try:
            response = await self.http_client.get(self.reviews_url, headers=headers, params=params)
        except httpx.HTTPError as e:
            raise ReviewsFetchError("Reviews API unreachable", detail=str(e)) from e
        
        if response.is_error:
            raise ReviewsFetchError("Reviews API returned an error", response.status_code, response.text[:500])
        
        return response.content
