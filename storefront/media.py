"""
Media uploads via signed direct upload.

The backend only signs the request; image bytes go straight to the media
host, so the upload call carries no backend bearer token.
"""
from typing import Any, Dict, Optional

from pydantic import Field

from storefront.config import DEFAULT_MEDIA_FOLDER, DEFAULT_MEDIA_UPLOAD_URL
from storefront.http.client import ApiClient
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.models import ApiModel

logger = get_logger(__name__)


class UploadSignature(ApiModel):
    signature: str
    timestamp: int
    api_key: str
    cloud_name: str
    folder: str = DEFAULT_MEDIA_FOLDER


class UploadedImage(ApiModel):
    url: str = Field(alias="secure_url")
    public_id: str
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None


class MediaService:
    def __init__(
        self,
        client: ApiClient,
        upload_url: str = DEFAULT_MEDIA_UPLOAD_URL,
        default_folder: str = DEFAULT_MEDIA_FOLDER,
    ):
        self.client = client
        self.upload_url = upload_url
        self.default_folder = default_folder

    async def request_signature(self, folder: Optional[str] = None, public_id: Optional[str] = None) -> UploadSignature:
        payload: Dict[str, Any] = {"folder": folder or self.default_folder}
        if public_id:
            payload["public_id"] = public_id
        response = await self.client.post("/cloudinary/signature", json=payload)
        return UploadSignature.model_validate(response)

    def build_upload_form(self, signature: UploadSignature) -> Dict[str, str]:
        """Form fields sent next to the file; quality/format are unsigned."""
        return {
            "signature": signature.signature,
            "timestamp": str(signature.timestamp),
            "api_key": signature.api_key,
            "folder": signature.folder,
            "quality": "auto",
            "fetch_format": "auto",
        }

    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str = "image/jpeg",
        folder: Optional[str] = None,
    ) -> UploadedImage:
        """Sign, then upload ``content`` straight to the media host."""
        signature = await self.request_signature(folder=folder)
        url = self.upload_url.format(cloud_name=signature.cloud_name)
        logger.info(f"Uploading {sanitize_string_for_logging(filename)} to folder {signature.folder}")
        response = await self.client.request(
            "POST",
            url,
            data=self.build_upload_form(signature),
            files={"file": (filename, content, content_type)},
            authenticated=False,
        )
        return UploadedImage.model_validate(response)
