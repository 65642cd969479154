"""EasyImage upload client."""

import logging
import mimetypes

import httpx

from ob2static.core.models import ImageUploadError, VaultFile

logger = logging.getLogger(__name__)


def media_type(file: VaultFile) -> str:
    """Media type for an attachment, derived from its extension."""
    guessed, _ = mimetypes.guess_type(file.name)
    if guessed:
        return guessed
    return f"image/{file.extension.lower()}"


class EasyImageUploader:
    """Uploads images to an EasyImage instance and returns their public URL.

    The endpoint takes a multipart form with the API key in ``token`` and
    the file in ``image`` and answers with JSON carrying ``url``.
    """

    def __init__(self, endpoint: str, api_key: str, client: httpx.AsyncClient):
        self.endpoint = endpoint
        self.api_key = api_key
        self.client = client

    async def upload(self, file: VaultFile, content: bytes) -> str:
        files = {"image": (file.basename, content, media_type(file))}
        try:
            response = await self.client.post(
                self.endpoint,
                data={"token": self.api_key},
                files=files,
            )
            response.raise_for_status()
            url = response.json().get("url")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            raise ImageUploadError(f"Error while uploading image {file.name}: {e}") from e

        if not url:
            raise ImageUploadError(f"Error while uploading image {file.name}: no url in response")

        logger.info(f"Uploaded {file.name} to {url}")
        return str(url)
