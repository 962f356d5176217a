from typing import Dict, Optional

import requests

from orderdesk.config import get_config
from orderdesk.logging import get_logger

class StoreAuthentication:
    """Holds the opaque bearer token for the remote store and builds HTTP sessions from it."""
    def __init__(self, token: Optional[str] = None) -> None:
        """Initializes the handler from an explicit token or the singleton AppConfig."""
        self.config = get_config()
        self.logger = get_logger(__name__)
        self._token = token if token is not None else self.config.store_token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def get_headers(self) -> Dict[str, str]:
        """Builds the request headers for the store.

        Returns:
            dict: JSON content headers, plus a bearer Authorization header when a token is held.
        """
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        else:
            self.logger.debug("No session token held; calling the store anonymously")
        return headers

    def clear_session(self) -> None:
        """Drops the held token after the store rejected it."""
        if self._token:
            self.logger.warning("Session token rejected by the store; clearing it")
        self._token = None

    def get_session(self) -> requests.Session:
        """Returns a requests Session pre-loaded with the current headers.

        Returns:
            requests.Session: The session used for all store calls.
        """
        session = requests.Session()
        session.headers.update(self.get_headers())
        self.logger.info(f"Instantiating store session for host: {self.config.store_url}")
        return session

def get_store_auth() -> StoreAuthentication:
    """Returns a new StoreAuthentication instance using the latest config."""
    return StoreAuthentication()
