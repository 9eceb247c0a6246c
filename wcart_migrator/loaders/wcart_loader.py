"""Wcart REST API publisher."""

import logging
import requests
from typing import Any, Dict, Optional

from .base import BasePublisher
from ..exceptions import PublishError
from ..models.record import PublishResult
from ..models.settings import MigrationSettings

logger = logging.getLogger(__name__)


def _singular(data_type: str) -> str:
    return data_type[:-1] if data_type.endswith("s") else data_type


class WcartPublisher(BasePublisher):
    """
    Publisher for the Wcart REST API.

    Each record is one ``POST {base_url}/{data_type}`` with a bearer token.
    Network errors, timeouts and non-2xx responses all come back as a failed
    PublishResult carrying a readable message.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        dry_run: bool = False,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Wcart publisher.

        Args:
            base_url: Base URL for the Wcart API
            api_key: Bearer token
            timeout: Per-request timeout in seconds for publishing
            connect_timeout: Timeout in seconds for connection checks
            dry_run: If True, skip HTTP calls and report success
            session: Custom requests session
        """
        super().__init__("wcart", dry_run)
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._session = session or self._create_session()

    @classmethod
    def from_settings(
        cls,
        settings: MigrationSettings,
        session: Optional[requests.Session] = None
    ) -> "WcartPublisher":
        return cls(
            base_url=settings.wcart_api_url,
            api_key=settings.wcart_api_key,
            timeout=settings.publish_timeout,
            connect_timeout=settings.connect_timeout,
            dry_run=settings.dry_run,
            session=session,
        )

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()

        if self.api_key:
            session.headers["Authorization"] = f"Bearer {self.api_key}"
        session.headers["Content-Type"] = "application/json"

        return session

    def publish(self, data_type: str, record: Dict[str, Any]) -> PublishResult:
        """Publish a single record to Wcart."""
        if self.dry_run:
            return PublishResult.ok(destination_id=None, response_data={"dry_run": True})

        try:
            return self._send(data_type, record)
        except PublishError as e:
            return PublishResult.failure(e.message, status_code=e.status_code)

    def _send(self, data_type: str, record: Dict[str, Any]) -> PublishResult:
        if not self.base_url:
            raise PublishError("Wcart API URL is not configured")

        url = f"{self.base_url}/{data_type}"

        try:
            response = self._session.post(url, json=record, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise PublishError(
                self._error_message(e.response), status_code=e.response.status_code
            ) from e
        except requests.exceptions.Timeout as e:
            raise PublishError(f"Timed out after {self.timeout}s posting to {url}") from e
        except requests.exceptions.RequestException as e:
            raise PublishError(f"Request to {url} failed: {e}") from e

        response_data = self._json_body(response)
        destination_id = self._extract_id(data_type, response_data)
        if destination_id is None:
            logger.warning(f"Wcart accepted a {data_type} record but returned no id")

        return PublishResult.ok(
            destination_id=destination_id,
            status_code=response.status_code,
            response_data=response_data,
        )

    def _json_body(self, response: requests.Response) -> Dict[str, Any]:
        if not response.text:
            return {}
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"data": body}

    def _extract_id(self, data_type: str, response_data: Dict[str, Any]) -> Optional[str]:
        nested = response_data.get("data")
        candidates = [response_data.get("id"), response_data.get(f"{_singular(data_type)}_id")]
        if isinstance(nested, dict):
            candidates.append(nested.get("id"))

        # 0 is a valid id, so only None means absent
        for target_id in candidates:
            if target_id is not None:
                return str(target_id)
        return None

    def _error_message(self, response: Optional[requests.Response]) -> str:
        if response is None:
            return "Wcart API request failed"

        message = f"Wcart API returned {response.status_code}"
        try:
            error_data = response.json()
        except ValueError:
            error_data = None

        if isinstance(error_data, dict):
            detail = error_data.get("message") or error_data.get("error")
            if detail:
                return f"{message}: {detail}"
        elif response.text:
            return f"{message}: {response.text[:200]}"
        return message

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def validate_connection(self) -> bool:
        """Check that the Wcart health endpoint answers."""
        if not self.base_url:
            logger.error("Wcart API URL is not configured")
            return False

        try:
            response = self._session.get(f"{self.base_url}/health", timeout=self.connect_timeout)
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"Wcart connection validation failed: {e}")
            return False
