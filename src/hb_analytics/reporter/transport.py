"""HTTP delivery of reporter payloads to the collector."""

import logging

import requests

logger = logging.getLogger(__name__)


class CollectorClient:
    """POST serialized payloads to a collector endpoint.

    Sends are fire-and-forget: failures are logged and reported through the
    return value, never retried.
    """

    def __init__(self, endpoint: str, timeout: float = 10):
        self.endpoint = endpoint
        self.timeout = timeout

    def send(self, data: str) -> bool:
        """Send one JSON payload."""
        logger.info(f"Sending data: {data}")
        try:
            response = requests.post(
                self.endpoint,
                data=data,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Error sending analytics to {self.endpoint}: {e}")
            return False

        if response.status_code >= 400:
            logger.error(f"Collector {self.endpoint} returned {response.status_code}")
            return False
        return True
