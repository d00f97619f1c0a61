"""
Remote Media Storage.

Uploads images to a Cloudinary-compatible media API over HTTPS. Every image
lands in one folder and is scaled down server-side to fit the configured
bounds. The reference saved on the note is the returned public URL; deletion
derives the object's public id from that URL.

API calls are signed: SHA-1 over the alphabetically sorted request
parameters (`k=v` joined with `&`) with the API secret appended.
"""

import hashlib
import re
import time
from typing import Any
from urllib.parse import unquote, urlparse

import httpx

from notes_app.core.concurrency import get_semaphore
from notes_app.core.exceptions import StorageError
from notes_app.core.logging import get_logger
from notes_app.storage.base import ImageUpload, StorageBackend

logger = get_logger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")
_TRANSFORMATION_SEGMENT = re.compile(r"^[a-z]{1,2}_")


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Compute the request signature for the given parameters."""
    to_sign = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _is_transformation(segment: str) -> bool:
    return "," in segment or bool(_TRANSFORMATION_SEGMENT.match(segment))


def extract_public_id(url: str) -> str | None:
    """
    Derive a media object's public id from its delivery URL.

    https://res.cloudinary.com/demo/image/upload/c_limit,w_1000/v1712/notes-app/abc.jpg
    → notes-app/abc

    Everything up to and including the version segment is skipped. Without
    a version, leading transformation segments (`c_limit,w_1000`, `w_500`)
    are skipped, but never the final segment. Returns None when the URL is
    not an upload delivery URL.
    """
    path = unquote(urlparse(url).path)
    marker = "/upload/"
    if marker not in path:
        return None
    segments = [s for s in path.split(marker, 1)[1].split("/") if s]

    for index, segment in enumerate(segments):
        if _VERSION_SEGMENT.match(segment):
            segments = segments[index + 1:]
            break
    else:
        while len(segments) > 1 and _is_transformation(segments[0]):
            segments = segments[1:]

    if not segments:
        return None
    last = segments[-1]
    if "." in last:
        segments[-1] = last.rsplit(".", 1)[0]
    public_id = "/".join(segments)
    return public_id or None


class RemoteMediaStorageBackend(StorageBackend):
    """Stores images with a hosted media API."""

    name = "remote"

    def __init__(
        self,
        api_base_url: str,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str,
        max_width: int,
        max_height: int,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = f"{api_base_url.rstrip('/')}/{cloud_name}/image"
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.transformation = f"c_limit,w_{max_width},h_{max_height}"
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        return {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }

    async def _post(self, action: str, **kwargs: Any) -> dict[str, Any]:
        async with get_semaphore("external_api"):
            response = await self._get_client().post(
                f"{self.base_url}/{action}",
                **kwargs,
            )
        response.raise_for_status()
        return response.json()

    async def store(self, upload: ImageUpload) -> str:
        params = self._signed({
            "folder": self.folder,
            "transformation": self.transformation,
        })
        try:
            body = await self._post(
                "upload",
                data=params,
                files={"file": (upload.filename or "image", upload.data, upload.content_type)},
            )
            reference = body["secure_url"]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(
                "Media upload failed",
                extra={"folder": self.folder, "error": str(e)},
            )
            raise StorageError("Error in uploading image", detail=str(e)) from e

        logger.info(
            "Image stored",
            extra={"reference": reference, "size": upload.size},
        )
        return reference

    async def delete(self, reference: str) -> bool:
        public_id = extract_public_id(reference)
        if public_id is None:
            logger.warning(
                "Cannot derive public id from image reference",
                extra={"reference": reference},
            )
            return False

        try:
            body = await self._post("destroy", data=self._signed({"public_id": public_id}))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Media delete failed",
                extra={"public_id": public_id, "error": str(e)},
            )
            return False

        result = body.get("result")
        if result not in ("ok", "not found"):
            logger.warning(
                "Media delete rejected",
                extra={"public_id": public_id, "result": result},
            )
            return False

        logger.info("Image deleted", extra={"public_id": public_id, "result": result})
        return True

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
