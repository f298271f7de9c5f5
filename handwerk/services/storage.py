"""Object storage backends.

``put(path, content, content_type)`` stores an object and returns a URL the
browser can load: a public URL, a signed URL for private buckets, or a
``/static`` path for the local backend.
"""
from __future__ import annotations

import logging
import os
import re
from typing import Optional

import requests

from handwerk.config import Settings
from handwerk.errors import UpstreamError

logger = logging.getLogger(__name__)

_BUCKET_MISSING = re.compile(r"not\s*found|does\s*not\s*exist", re.IGNORECASE)


class LocalStorage:
    """Writes objects under ``STATIC_DIR/<bucket>``, served by the /static mount."""

    def __init__(self, static_dir: str, bucket: str):
        self.static_dir = static_dir
        self.bucket = bucket

    def put(self, path: str, content: bytes, content_type: str) -> str:
        target = os.path.join(self.static_dir, self.bucket, *path.split("/"))
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)
        return f"/static/{self.bucket}/{path}"


class SupabaseStorage:
    """Supabase Storage over its REST API."""

    def __init__(self, url: str, key: str, bucket: str, public: bool = True,
                 signed_url_ttl: int = 3600, session: Optional[requests.Session] = None, timeout: float = 30):
        self.url = url.rstrip("/")
        self.bucket = bucket
        self.public = public
        self.signed_url_ttl = signed_url_ttl
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Authorization": f"Bearer {key}", "apikey": key}

    def _upload(self, path: str, content: bytes, content_type: str) -> requests.Response:
        return self.session.post(
            f"{self.url}/storage/v1/object/{self.bucket}/{path}",
            data=content,
            headers={**self.headers, "Content-Type": content_type, "x-upsert": "false"},
            timeout=self.timeout,
        )

    @staticmethod
    def _message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    def _is_bucket_missing(self, message: str) -> bool:
        return "bucket" in message.lower() and bool(_BUCKET_MISSING.search(message))

    def create_bucket(self) -> None:
        r = self.session.post(
            f"{self.url}/storage/v1/bucket",
            json={"id": self.bucket, "name": self.bucket, "public": self.public},
            headers=self.headers,
            timeout=self.timeout,
        )
        if r.status_code == 409 or r.ok:
            return
        message = self._message(r)
        if "already exists" in message.lower():
            return
        raise UpstreamError(f"Bucket missing and could not be created: {message}")

    def put(self, path: str, content: bytes, content_type: str) -> str:
        try:
            r = self._upload(path, content, content_type)
            if not r.ok:
                message = self._message(r)
                if not self._is_bucket_missing(message):
                    raise UpstreamError(message)
                logger.warning("[storage] bucket %s missing, creating it", self.bucket)
                self.create_bucket()
                r = self._upload(path, content, content_type)
                if not r.ok:
                    raise UpstreamError(self._message(r))
        except requests.RequestException as exc:
            raise UpstreamError(str(exc)) from exc
        return self.url_for(path)

    def url_for(self, path: str) -> str:
        if self.public:
            return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"
        r = self.session.post(
            f"{self.url}/storage/v1/object/sign/{self.bucket}/{path}",
            json={"expiresIn": self.signed_url_ttl},
            headers=self.headers,
            timeout=self.timeout,
        )
        if not r.ok:
            raise UpstreamError(f"Uploaded, but URL could not be generated: {self._message(r)}")
        signed = r.json().get("signedURL") or r.json().get("signedUrl") or ""
        return f"{self.url}/storage/v1{signed}" if signed.startswith("/") else signed


def build_storage(settings: Settings):
    if settings.STORAGE_BACKEND == "supabase":
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise RuntimeError("Supabase env vars not configured")
        return SupabaseStorage(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY,
            settings.SUPABASE_BUCKET,
            public=settings.SUPABASE_PUBLIC_BUCKET,
            signed_url_ttl=settings.SIGNED_URL_TTL,
        )
    return LocalStorage(settings.STATIC_DIR, settings.SUPABASE_BUCKET)
