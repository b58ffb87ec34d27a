import base64
import logging
from dataclasses import dataclass

import requests

from app.core.config import settings
from app.core.errors import UploadError

logger = logging.getLogger(__name__)


@dataclass
class ImgbbConfig:
    api_key: str
    upload_url: str = "https://api.imgbb.com/1/upload"
    timeout: int = 20


@dataclass(frozen=True)
class UploadedImage:
    url: str          # permanent, publicly dereferenceable
    delete_url: str   # capability to remove the image later


class ImgbbClient:
    """Uploads transaction screenshots to ImgBB. One attempt per call; no retries."""

    def __init__(self, cfg: ImgbbConfig, session: requests.Session | None = None):
        self.cfg = cfg
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "ImgbbClient":
        return cls(ImgbbConfig(
            api_key=settings.IMGBB_API_KEY,
            upload_url=settings.IMGBB_UPLOAD_URL,
            timeout=settings.IMGBB_TIMEOUT_SECONDS,
        ))

    def _redact(self, text: str) -> str:
        if self.cfg.api_key:
            return text.replace(self.cfg.api_key, "***")
        return text

    def _fail(self, reason: str) -> UploadError:
        msg = self._redact(f"Failed to upload image to ImgBB: {reason}")
        logger.error("ImgBB upload error: %s", msg)
        return UploadError(msg)

    def upload(self, image_bytes: bytes, name: str) -> UploadedImage:
        if not self.cfg.api_key:
            raise self._fail("IMGBB_API_KEY is not configured")

        payload = {
            "image": base64.b64encode(image_bytes).decode("ascii"),
            "name": name,
        }
        try:
            r = self._session.post(
                self.cfg.upload_url,
                params={"key": self.cfg.api_key},
                data=payload,
                timeout=self.cfg.timeout,
            )
        except requests.RequestException as e:
            raise self._fail(str(e)) from e

        try:
            data = r.json() if r.text else {}
        except ValueError:
            data = {"raw": r.text}

        if r.status_code >= 400 or not data.get("success"):
            upstream = (data.get("error") or {}).get("message") if isinstance(data.get("error"), dict) else None
            raise self._fail(f"ImgBB {r.status_code}: {upstream or data}")

        body = data.get("data") or {}
        url = body.get("url")
        if not url:
            raise self._fail("response did not include an image url")
        return UploadedImage(url=url, delete_url=body.get("delete_url") or "")

    def close(self) -> None:
        self._session.close()
