"""Page persistence API client with optional caching."""

import hashlib
import json
from pathlib import Path
from typing import Any

import requests
from loguru import logger

from page_builder.config import API_CACHE_PREFIX, API_TOKEN_FILES, PAGE_API_URL
from page_builder.errors import PageApiError


class PageApi:
    """Encapsulated page API with caching of reads."""

    def __init__(self, *, base_url: str = PAGE_API_URL, from_cache: bool = False) -> None:
        self.base_url = base_url.rstrip("/")
        self.from_cache = from_cache
        self.sess = requests.Session()

        api_token_name: str | None = None
        for token_path in API_TOKEN_FILES:
            try:
                self.api_token = token_path.read_text(encoding="utf-8").strip()
                api_token_name = str(token_path)
                break
            except FileNotFoundError:
                pass
        else:
            msg = f"Cannot find page API token file, was looking at {API_TOKEN_FILES!r}"
            raise RuntimeError(msg)

        self.sess.headers["Authorization"] = f"Bearer {self.api_token}"

        self.api_cache_prefix: str | None = API_CACHE_PREFIX if self.from_cache else None

        logger.debug(
            "API ready: {!r}, token from {!r}, from_cache {!r}, api_cache_prefix {!r}",
            self.base_url,
            api_token_name,
            self.from_cache,
            self.api_cache_prefix,
        )

        if self.api_cache_prefix:
            Path(self.api_cache_prefix).parent.mkdir(parents=True, exist_ok=True)

    def _check(self, path: str, rv: dict[str, Any]) -> dict[str, Any]:
        if rv.get("code") != 0:
            msg = f"API call failed: {path!r} -> ({rv.get('code')!r}, {rv.get('message')!r})"
            raise PageApiError(msg)
        return rv

    def _cache_name(self, path: str, args: dict[str, Any]) -> str | None:
        if not self.api_cache_prefix:
            return None
        name_last = path
        if args:
            params_str = json.dumps(args, sort_keys=True, separators=(",", ":"))
            if len(params_str) > 64:
                params_str = hashlib.sha1(params_str.encode("utf-8")).hexdigest()
            name_last += "--" + params_str
        return self.api_cache_prefix + name_last.replace("/", "--")

    def get(self, path: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET an API endpoint, return json. Served from cache when enabled."""
        args = args or {}
        log_name = self._cache_name(path, args)
        if log_name and Path(log_name).exists():
            logger.debug("Filled from cache: {!r}", log_name)
            with open(log_name, encoding="utf-8") as f:
                return json.load(f)  # type: ignore[no-any-return]

        logger.debug("Making request: GET {!r} {}", path, repr(args)[:32])
        r = self.sess.get(f"{self.base_url}/{path}", params=args)
        r.raise_for_status()
        rv = self._check(path, r.json())
        if log_name:
            with open(log_name, "w", encoding="utf-8") as f:
                f.write(r.text)
        return rv

    def post(self, path: str, args: dict[str, Any]) -> dict[str, Any]:
        """POST to an API endpoint, return json. Never cached."""
        logger.debug("Making request: POST {!r} {}", path, repr(args)[:32])
        r = self.sess.post(f"{self.base_url}/{path}", json=args)
        r.raise_for_status()
        return self._check(path, r.json())

    def get_page_detail(self, page_id: int) -> dict[str, Any]:
        """Fetch a page record."""
        rv = self.get(f"page/detail/{page_id}")
        return rv.get("data") or {}  # type: ignore[no-any-return]

    def save_page(self, page_id: int, page_data: str, **meta: Any) -> dict[str, Any]:
        """Store serialized page data (and optional metadata) for a page."""
        return self.post("page/update", {"id": page_id, "pageData": page_data, **meta})
