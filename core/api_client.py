import logging
import time
from typing import Any, Dict, Optional

import requests

from .data_models import MediaAction, PlaybackSnapshot
from .media_source import MediaSource, MediaSourceError, parse_status_payload

logger = logging.getLogger(__name__)


class AuthenticationError(MediaSourceError):
    """Raised when the refresh token is rejected."""


class SpotifyWebClient(MediaSource):
    """Media source talking to the Spotify Web API over HTTPS."""

    token_url = "https://accounts.spotify.com/api/token"

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        refresh_token: Optional[str],
        *,
        base_url: str = "https://api.spotify.com/v1",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

        self.token_data: Optional[Dict[str, Any]] = None
        self.token_expires_at: float = 0.0

    def authenticate(self) -> None:
        """Exchange the refresh token for a fresh access token."""
        if not (self.client_id and self.client_secret and self.refresh_token):
            raise AuthenticationError("Spotify client id, secret and refresh token are required")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": self.refresh_token,
        }
        try:
            response = self.session.post(
                self.token_url,
                data=data,
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MediaSourceError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Token refresh failed: {response.status_code} - {response.text}")
            raise AuthenticationError(f"Token refresh failed with HTTP {response.status_code}")

        self.token_data = response.json()
        expires_in = int(self.token_data.get("expires_in", 3600))
        # 30s margin before the reported expiry
        self.token_expires_at = time.time() + expires_in - 30
        logger.info(f"Access token refreshed. Expires in: {expires_in} seconds")

    def _get_auth_headers(self) -> Dict[str, str]:
        if not self.token_data or time.time() >= self.token_expires_at:
            self.authenticate()
        assert self.token_data is not None
        return {"Authorization": f"Bearer {self.token_data['access_token']}"}

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send an authenticated request, refreshing the token once on 401."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, headers=self._get_auth_headers(), timeout=self.timeout, **kwargs
            )
            if response.status_code == 401:
                logger.info("Access token rejected, refreshing")
                self.token_data = None
                response = self.session.request(
                    method, url, headers=self._get_auth_headers(), timeout=self.timeout, **kwargs
                )
        except requests.RequestException as e:
            raise MediaSourceError(f"{method} {path} failed: {e}") from e
        return response

    def query(self) -> Optional[PlaybackSnapshot]:
        response = self._request("GET", "/me/player/currently-playing")

        if response.status_code == 204:
            return None
        if response.status_code != 200:
            raise MediaSourceError(f"Get currently playing failed: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise MediaSourceError(f"Currently playing response is not JSON: {e}") from e
        return parse_status_payload(data)

    def command(self, action: MediaAction) -> None:
        if action is MediaAction.TOGGLE:
            snapshot = self.query()
            if snapshot is not None and snapshot.is_playing:
                response = self._request("PUT", "/me/player/pause")
            else:
                response = self._request("PUT", "/me/player/play")
        elif action is MediaAction.NEXT:
            response = self._request("POST", "/me/player/next")
        elif action is MediaAction.PREVIOUS:
            response = self._request("POST", "/me/player/previous")
        else:
            snapshot = self.query()
            if snapshot is None or not snapshot.track_id:
                raise MediaSourceError("No current track to save")
            response = self._request("PUT", "/me/tracks", params={"ids": snapshot.track_id})

        if response.status_code not in (200, 202, 204):
            raise MediaSourceError(
                f"{action.value} failed: HTTP {response.status_code} - {response.text}"
            )

    def close(self) -> None:
        """Close HTTP session"""
        self.session.close()
