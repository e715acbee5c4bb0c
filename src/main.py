"""tasktrack - a personal, session-gated task tracker."""

import asyncio
import logging
import sys

import httpx

from src.core.config import settings
from src.core.gateway import RestGateway
from src.core.logging import configure_logfire
from src.core.session_storage import FileSessionStorage
from src.interface.task_board import TaskBoard


logger = logging.getLogger(__name__)


async def check_gateway_connectivity() -> None:
    """Verify the task gateway answers.

    Raises:
        ConnectionError: If unable to reach the gateway
    """
    try:
        async with httpx.AsyncClient(timeout=settings.gateway_timeout_seconds) as client:
            response = await client.get(f"{settings.gateway_url}/tasks", params={"_limit": 1})
            if response.is_success:
                logger.info("startup_validation", extra={"service": "gateway", "status": "ok"})
            else:
                raise ConnectionError(f"Gateway returned status {response.status_code}")
    except Exception as e:
        logger.error("startup_validation", extra={"service": "gateway", "status": "failed", "error": str(e)})
        raise ConnectionError(f"Gateway connectivity check failed: {e}") from e


async def validate_startup_configuration() -> None:
    """Validate required settings and gateway connectivity, exiting on failure."""
    logger.info("startup_validation_begin")

    try:
        settings.require_credential("gateway_url", "Task gateway URL")
        settings.require_credential("session_file", "Session file")
        logger.info("startup_validation", extra={"stage": "settings", "status": "ok"})

        await check_gateway_connectivity()

        logger.info("startup_validation_complete", extra={"status": "ok"})

    except (ValueError, ConnectionError) as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\nStartup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


async def main() -> None:
    """Restore the persisted session and report the signed-in user's tasks."""
    configure_logfire()
    await validate_startup_configuration()

    gateway = RestGateway()
    try:
        board = TaskBoard(gateway=gateway, storage=FileSessionStorage(settings.session_file))
        result = await board.start()
        if board.principal is None:
            logger.info("No active session; sign in to load tasks")
            return
        if not result.ok:
            logger.error("Initial task load failed", extra={"error": result.message})
            return

        logger.info(
            "Session restored for %s with %d task(s)",
            board.principal.username,
            len(board.tasks),
            extra={"user_id": board.principal.id},
        )
    finally:
        await gateway.aclose()


def run() -> None:
    """Console entry point."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())


if __name__ == "__main__":
    run()
