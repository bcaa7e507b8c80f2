import logging
import os
from fastapi import APIRouter, Depends, Request, HTTPException, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from config import PRIMARY_BRANCH
from dependencies import get_registry, get_script_runner
from deployer import ScriptRunner
from models.push_event import parse_push_event
from models.registry import RepositoryRegistry

router = APIRouter()
logger = logging.getLogger(__name__)

# Other methods are answered the same way by the 405 handler in main.py.
WEBHOOK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ONLY_POST_ALLOWED = "Only POST allowed"


@router.api_route("/webhook", methods=WEBHOOK_METHODS, summary="Push Webhook Endpoint")
async def handle_webhook(
        request: Request,
        registry: RepositoryRegistry = Depends(get_registry),
        runner: ScriptRunner = Depends(get_script_runner)
):
    # 1. Only POST carries a push event.
    if request.method != "POST":
        raise method_not_allowed(request.method)

    # 2. Parse payload.
    body_bytes = await request.body()
    try:
        event = parse_push_event(body_bytes)
    except ValidationError as e:
        reasons = "; ".join(error["msg"] for error in e.errors())
        logger.warning(f"Failed to decode payload: {reasons}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid payload"
        )

    push_branch = event.branch
    repo_name = event.repository.name
    logger.debug(f"Received webhook: repo={repo_name}, branch={push_branch}")

    # 3. Pushes to any other branch are expected and harmless.
    if push_branch != PRIMARY_BRANCH:
        logger.info(f"Ignoring push to branch '{push_branch}' of repository '{repo_name}'.")
        return PlainTextResponse(f"Ignoring branch: {push_branch}\n")

    # 4. Find the deploy script for this repository.
    script_path = registry.lookup(repo_name)
    if script_path is None:
        logger.warning(f"No deploy script configured for repo: {repo_name}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Unknown repository"
        )

    # 5. Make sure the script is actually there.
    try:
        os.stat(script_path)
    except FileNotFoundError:
        logger.error(f"Deploy script not found for {repo_name}: {script_path}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Deploy script not found"
        )
    except OSError as e:
        # Not provably missing; let the run itself report what is wrong.
        logger.debug(f"Could not stat deploy script {script_path}: {e}")

    # 6. The request waits for the script to exit.
    outcome = await runner.run(repo_name, script_path)

    if not outcome.success:
        logger.error(f"Deploy failed for {repo_name} ({outcome.describe()})\nOutput: {outcome.text}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Deploy failed: {outcome.text}"
        )

    logger.info(f"Deploy successful for {repo_name}\nOutput: {outcome.text}")
    return PlainTextResponse(f"Deploy successful for {repo_name}\n")


def method_not_allowed(method: str) -> HTTPException:
    logger.warning(f"Rejected {method} request to the webhook endpoint.")
    return HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail=ONLY_POST_ALLOWED
    )
