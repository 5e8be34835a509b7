import logging
from typing import Callable, Optional

import pydantic
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from .config import Settings, get_settings
from .models import decode_update
from .tgio import NotifierError, Output, tokenhash

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

REPLY_TEXT = "Hello, I'm Vercel Bot!"
WEBHOOK_PATH = "/api/webhook"
# methods routed to the handler, any other one is answered by method_not_allowed
WEBHOOK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

OutputFactory = Callable[[str], Output]


class Webhook:
    """
    Handles a single webhook request.

    Attributes:
        token: Bot API token, None or empty when not configured.
        output_factory: Builds the Output used to send the reply.
        reply_text: Text sent back to every chat.
    """

    def __init__(
        self,
        token: Optional[str],
        output_factory: OutputFactory = Output,
        reply_text: str = REPLY_TEXT,
    ) -> None:
        self.token = token
        self.output_factory = output_factory
        self.reply_text = reply_text

    async def handle(self, request: Request) -> Response:
        """
        Validate, decode and answer an incoming update.

        Any failure short-circuits into an error response, nothing is retried.

        Args:
            request: Incoming HTTP request.

        Returns:
            405 for non-POST methods, 500 for a missing token or a failed
            reply, 400 for an unreadable or undecodable body, 200 otherwise.
        """
        if request.method != "POST":
            logger.debug(f"Rejected {request.method} request")
            return Response(status_code=405)

        if not self.token:
            logger.error("TELEGRAM_BOT_TOKEN not set")
            return PlainTextResponse("TELEGRAM_BOT_TOKEN not set", status_code=500)

        try:
            body = await request.body()
        except (ClientDisconnect, OSError, RuntimeError) as e:
            logger.warning(f"Failed to read request body: {e!r}")
            return PlainTextResponse("Error reading request body", status_code=400)

        try:
            update = decode_update(body)
        except pydantic.ValidationError as e:
            logger.warning(f"Failed to parse update: {e.error_count()} error(s)")
            return PlainTextResponse("Error parsing JSON", status_code=400)

        message = update.actionable_message()
        if message is None:
            logger.info(f"Unhandled update {update.update_id}: no text message")
            return Response(status_code=200)

        user = message.from_
        if user is not None:
            sender = f"@{user.username} ({user.id})"
        else:
            sender = "<UNK>"
        logger.info(
            f"Got text message {message.message_id} from user {sender}"
            f" in {message.chat.type} chat {message.chat.id}"
        )

        try:
            output = self.output_factory(self.token)
            await output.send_message(message.chat.id, self.reply_text)
        except NotifierError as e:
            logger.error(f"Failed to send reply to chat {message.chat.id}: {e}")
            return PlainTextResponse(f"Error sending message: {e}", status_code=500)

        return PlainTextResponse("OK", status_code=200)


def get_output_factory(settings: Settings = Depends(get_settings)) -> OutputFactory:
    def factory(token: str) -> Output:
        return Output(token, api_url=settings.telegram_api_url)

    return factory


app = FastAPI(title="hookbot", docs_url=None, redoc_url=None, openapi_url=None)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
    """405 with an empty body, whatever the method"""
    if exc.status_code == 405:
        logger.debug(f"Rejected {request.method} request to {request.url.path}")
        return Response(status_code=405)
    return await http_exception_handler(request, exc)


@app.api_route(WEBHOOK_PATH, methods=WEBHOOK_METHODS)
async def webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    output_factory: OutputFactory = Depends(get_output_factory),
) -> Response:
    """Telegram webhook endpoint"""
    handler = Webhook(settings.telegram_bot_token, output_factory=output_factory)
    return await handler.handle(request)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


def main():
    try:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level.upper())
        if settings.telegram_bot_token:
            logger.info(
                f"Starting webhook with token_hash = {tokenhash(settings.telegram_bot_token)}"
            )
        else:
            logger.warning("TELEGRAM_BOT_TOKEN not set, updates will be rejected")
        uvicorn.run(app, host=settings.host, port=settings.port)
        return 0  # Success exit code
    except pydantic.ValidationError as e:
        logger.error(f"Pydantic Validation Error(s) encountered:\n{e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
