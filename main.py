# main.py

import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import DEBUG_MODE, PRIMARY_BRANCH, get_port
from dependencies import registry, runner
from logging_config import setup_logging

# Routers
from routers.webhook import router as webhook_router, method_not_allowed, ONLY_POST_ALLOWED

# Initialize logging once
setup_logging(DEBUG_MODE)

logger = logging.getLogger(__name__)
logger.info("Starting the PushHook application...")
logger.info(f"Primary branch: {PRIMARY_BRANCH}")
logger.info(f"Shell path: {runner.shell_path}")
logger.info(f"Deploy timeout: {runner.timeout or 'unbounded'}")
logger.info(f"Serialize deploys per repository: {runner.serialize}")
logger.info(f"Registered repositories: {', '.join(sorted(registry.scripts))}")

app = FastAPI(
    title="PushHook",
    description="Runs a repository's deploy script when its primary branch is pushed",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None
)

app.include_router(webhook_router)


@app.exception_handler(StarletteHTTPException)
async def plain_text_http_exception(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405 and exc.detail != ONLY_POST_ALLOWED and request.url.path == "/webhook":
        # Methods the route does not list (TRACE, PROPFIND, ...) land here.
        exc = method_not_allowed(request.method)
    # Webhook senders get the bare message, not a JSON envelope.
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


def run():
    port = get_port()
    logger.info(f"Webhook server listening on :{port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_config=None)


if __name__ == "__main__":
    run()
