#!/usr/bin/env python3
"""Operator script to activate or deactivate user accounts.

Usage:
    uv run python scripts/set_user_active.py <email> --deactivate
    uv run python scripts/set_user_active.py <email> --activate
    uv run python scripts/set_user_active.py --list
"""

import asyncio
import logging
import sys

from src.core.errors import TaskTrackerError
from src.core.gateway import RestGateway
from src.services import user_service


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


async def list_users(gateway: RestGateway) -> None:
    """List all users with their active flag."""
    users = await user_service.list_users(gateway)

    for user in users:
        status = "active" if user.is_active else "deactivated"
        logger.info(f"{user.email} - {user.username} ({status})")


async def set_active(gateway: RestGateway, email: str, *, is_active: bool) -> None:
    """Set the active flag for the user registered under an email.

    Args:
        gateway: Gateway client
        email: Login email of the account
        is_active: New value of the flag
    """
    user = await user_service.set_user_active(gateway, email=email, is_active=is_active)
    logger.info(f"{user.email} is now {'active' if user.is_active else 'deactivated'}")


def print_usage() -> None:
    """Print usage information."""
    logger.info(__doc__)


async def main() -> None:
    """Main entry point."""
    args = sys.argv[1:]

    if not args or "--help" in args or "-h" in args:
        print_usage()
        return

    gateway = RestGateway()
    try:
        if "--list" in args:
            await list_users(gateway)
            return

        email = args[0]
        if "--deactivate" in args:
            await set_active(gateway, email, is_active=False)
        elif "--activate" in args:
            await set_active(gateway, email, is_active=True)
        else:
            print_usage()
            sys.exit(1)
    except TaskTrackerError as e:
        logger.error(str(e))
        sys.exit(1)
    finally:
        await gateway.aclose()


if __name__ == "__main__":
    asyncio.run(main())
