import base64
import hashlib
import logging
from typing import Optional

import httpx

from .models import Reply

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


def tokenhash(token: str) -> str:
    """
    Generate a URL-safe base64-encoded SHA-256 hash of a token string.

    Args:
        token: The token string to be hashed.

    Returns:
        A URL-safe base64-encoded representation of the SHA-256 hash digest.
    """
    digest = hashlib.sha256(token.encode("utf-8")).digest()
    urlsafe = base64.urlsafe_b64encode(digest).decode("utf-8")
    return urlsafe


class NotifierError(Exception):
    """Outbound Telegram call failed"""


class TelegramAPIError(NotifierError):
    """
    Telegram answered with a non-200 status.

    Attributes:
        status_code: HTTP status returned by the Bot API.
        body: Raw response body, kept as diagnostic text.
    """

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"telegram API error: {body}")
        self.status_code = status_code
        self.body = body


class Output:
    """
    Sends bot replies through the Telegram Bot API.

    Every call opens its own client and waits for the full response, so
    nothing is shared between requests.

    Attributes:
        token: Bot API token.
        api_url: Bot API base URL.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        token: str,
        api_url: str = TELEGRAM_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.transport = transport
        logger.debug(f"Bot output handler created with token_hash = {tokenhash(token)}")

    def method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self.token}/{method}"

    def redact(self, text: str) -> str:
        """Replace the raw token in error text with its hash"""
        return text.replace(self.token, f"<token:{tokenhash(self.token)}>")

    async def send_message(self, chat_id: int, text: str) -> None:
        """
        Send a text message to a chat.

        Args:
            chat_id: Telegram chat ID to send the message to.
            text: Message text.

        Raises:
            NotifierError: the request could not be made.
            TelegramAPIError: Telegram answered with a status other than 200.
        """
        reply = Reply(chat_id=chat_id, text=text)
        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.post(
                    self.method_url("sendMessage"),
                    json=reply.model_dump(),
                )
            except httpx.RequestError as e:
                detail = self.redact(f"{type(e).__name__}: {e}")
                logger.error(f"Teleapi/sendMessage HTTP request error: {detail}")
                raise NotifierError(f"error making request: {detail}") from e
        if response.status_code != httpx.codes.OK:
            logger.error(
                f"Teleapi/sendMessage HTTP status error: {response.status_code}"
            )
            raise TelegramAPIError(response.status_code, response.text)
        logger.info(f"Sent a message to chat {chat_id}")
