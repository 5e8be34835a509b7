# serverless entrypoint, routed as /api/webhook
from hookbot.main import app  # noqa: F401
