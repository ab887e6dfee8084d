"""
Image fetcher: downloads the citizen's photo and encodes it for inlining.

No preprocessing or compression is applied; the bytes are sent as-is.
"""

import base64
from typing import Optional

import httpx
import structlog

from civic_triage.llm.exceptions import ImageFetchError
from civic_triage.models.llm_models import ImagePayload

logger = structlog.get_logger(__name__)


def normalize_mime_type(content_type: Optional[str], default: str = "image/jpeg") -> str:
    """
    Strip parameters from a Content-Type header value.
    
    >>> normalize_mime_type("image/png; charset=binary")
    'image/png'
    >>> normalize_mime_type(None)
    'image/jpeg'
    """
    if not content_type:
        return default
    mime_type = content_type.split(";", 1)[0].strip().lower()
    return mime_type or default


class ImageFetcher:
    """Fetch an image over HTTP(S) and return it base64-encoded."""
    
    def __init__(
        self,
        timeout: float = 20.0,
        default_mime_type: str = "image/jpeg",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.default_mime_type = default_mime_type
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
    
    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client
    
    async def fetch(self, image_url: str) -> ImagePayload:
        """
        Download the image.
        
        Args:
            image_url: Publicly fetchable image URL
            
        Returns:
            ImagePayload with base64 data and forwarded MIME type
            
        Raises:
            ImageFetchError: Non-2xx response or transport failure
        """
        logger.info("Fetching image", image_url=image_url)
        try:
            client = await self._get_client()
            response = await client.get(image_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ImageFetchError(
                f"Failed to fetch image: {type(e).__name__}: {e}",
                details={"image_url": image_url, "error_type": type(e).__name__},
            ) from e
        
        if not response.is_success:
            raise ImageFetchError(
                f"Failed to fetch image: {response.status_code} {response.reason_phrase}",
                details={"image_url": image_url, "status": response.status_code},
            )
        
        content = response.content
        mime_type = normalize_mime_type(
            response.headers.get("content-type"), self.default_mime_type
        )
        logger.info("Image ready", size_bytes=len(content), mime_type=mime_type)
        
        return ImagePayload(
            data_base64=base64.b64encode(content).decode("ascii"),
            mime_type=mime_type,
            size_bytes=len(content),
        )
    
    async def close(self):
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
