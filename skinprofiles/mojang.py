"""HTTP transport for the Mojang identity service."""

import uuid
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .env import Settings
from .exceptions import APIRetryError, MojangAPIError
from .logger import get_logger
from .profile import GameProfile
from .retry import RateLimiter, parse_retry_after, should_retry_http_status

NOT_FOUND_STATUSES = {204, 404}


class MojangAPI:
    """
    Thin client for the two identity service lookups.

    Responses are classified into three outcomes: a JSON body, "no such
    account" (None), or an exception. Transient failures and rate limiting
    raise APIRetryError; anything else unexpected raises MojangAPIError.
    Nothing is retried here.
    """

    def __init__(
        self,
        name_api_url: str = Settings.name_api_url,
        session_api_url: str = Settings.session_api_url,
        timeout: float = Settings.http_timeout,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
    ):
        self.name_api_url = name_api_url
        self.session_api_url = session_api_url
        self.timeout = timeout
        self.rate_limiter = rate_limiter or RateLimiter()
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    @classmethod
    def from_settings(cls, settings: Settings) -> "MojangAPI":
        return cls(
            name_api_url=settings.name_api_url,
            session_api_url=settings.session_api_url,
            timeout=settings.http_timeout,
            rate_limiter=RateLimiter(settings.rate_limit, settings.rate_window),
        )

    def get_json(self, url: str) -> Optional[Dict[str, Any]]:
        """Fetch URL and classify the response.

        Returns:
            Decoded JSON object, or None if the service reports no such account

        Raises:
            APIRetryError: On timeouts, connection errors, 5xx, 408/429,
                a local rate limit, or an unreadable success body
            MojangAPIError: On any other non-conforming response
        """
        self.rate_limiter.acquire()
        get_logger().record_api_call()
        get_logger().debug("Identity service request", url=url)

        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            get_logger().warning("Identity service request timed out", url=url)
            raise APIRetryError(f"Request timed out: {url}")
        except requests.exceptions.ConnectionError as e:
            get_logger().warning("Identity service connection failed", url=url, error=str(e))
            raise APIRetryError(f"Connection failed: {url} ({e})")
        except requests.exceptions.RequestException as e:
            get_logger().error("Identity service request error", url=url, error=str(e))
            raise MojangAPIError(f"Request error: {url} ({e})")

        status = resp.status_code
        if status in NOT_FOUND_STATUSES:
            return None

        if should_retry_http_status(status):
            retry_after = parse_retry_after(resp.headers.get("Retry-After"))
            reason = "Rate limited" if status == 429 else "Service unavailable"
            get_logger().warning(
                f"{reason} by identity service", url=url, status=status,
                retry_after=retry_after,
            )
            raise APIRetryError(
                f"{reason} ({status}): {url}", status_code=status, retry_after=retry_after
            )

        if status != 200:
            get_logger().error(
                "Unexpected identity service response", url=url, status=status,
                body=resp.text[:200],
            )
            raise MojangAPIError(f"Unexpected response ({status}): {url}", status_code=status)

        try:
            data = resp.json()
        except ValueError:
            get_logger().warning("Unreadable identity service response", url=url)
            raise APIRetryError(f"Malformed response body: {url}", status_code=status)

        if not isinstance(data, dict):
            get_logger().error("Identity service returned non-object JSON", url=url)
            raise MojangAPIError(f"Expected a JSON object: {url}", status_code=status)
        return data

    def username_to_uuid(self, username: str) -> Optional[uuid.UUID]:
        """Look up the account UUID for a username; None if unknown."""
        data = self.get_json(self.name_api_url + quote(username, safe=""))
        if data is None:
            return None
        try:
            return uuid.UUID(str(data["id"]))
        except (KeyError, ValueError):
            get_logger().error("Username lookup returned no usable id", username=username, data=data)
            raise MojangAPIError(f"Username lookup for {username!r} returned no usable id")

    def profile_by_uuid(self, profile_id: uuid.UUID) -> Optional[GameProfile]:
        """Fetch the textured profile for a UUID; None if unknown."""
        data = self.get_json(f"{self.session_api_url}{profile_id.hex}?unsigned=false")
        if data is None:
            return None
        try:
            return GameProfile.from_dict(data)
        except (KeyError, ValueError) as e:
            get_logger().error("Profile lookup returned a malformed profile", uuid=profile_id, error=str(e))
            raise MojangAPIError(f"Malformed profile for {profile_id}: {e}")

    def close(self):
        self.session.close()
