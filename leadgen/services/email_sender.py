"""
Outbound E-mail Sender

Sends one HTML e-mail per call through the Resend REST API.

API: POST https://api.resend.com/emails (Bearer auth)
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from leadgen.common.config import Config
from leadgen.common.error_handling import MissingCredentialError
from leadgen.common.retry import api_call_with_retry

logger = logging.getLogger(__name__)


class EmailSender(ABC):
    """Abstract outbound e-mail transport."""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one e-mail.

        Returns:
            True when the provider accepted the message, False otherwise
        """
        pass


class ResendEmailSender(EmailSender):
    """Resend-backed sender."""

    API_URL = "https://api.resend.com/emails"

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_address: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key if api_key is not None else Config.RESEND_API_KEY
        self._from = from_address or Config.EMAIL_FROM
        self._timeout = timeout if timeout is not None else Config.HTTP_TIMEOUT_SECONDS
        self._client = client

    async def send(self, to: str, subject: str, html: str) -> bool:
        if not self._api_key:
            raise MissingCredentialError("RESEND_API_KEY")

        payload = {"from": self._from, "to": [to], "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async def call() -> httpx.Response:
            if self._client is not None:
                response = await self._client.post(self.API_URL, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as http_client:
                    response = await http_client.post(self.API_URL, json=payload, headers=headers)
            response.raise_for_status()
            return response

        try:
            await api_call_with_retry(call)
        except httpx.HTTPStatusError as e:
            try:
                detail = e.response.json().get("message", str(e))
            except Exception:
                detail = str(e)
            logger.error(f"Failed to send email to {to}: HTTP {e.response.status_code}: {detail}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

        logger.info(f"Email sent to {to}")
        return True
