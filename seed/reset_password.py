#!/usr/bin/env python3
"""
Reset the password of an account (operator tool).

Run:
    python seed/reset_password.py --email user@example.com --password <NEW-PASSWORD>
"""

import argparse
import sys

from aws_lambda_powertools import Logger

from core.config import get_settings
from core.models.errors import OrganizerError
from handlers.auth.service import AuthService

logger = Logger(service="reset-password")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reset a user's password")

    parser.add_argument("--email", required=True, help="Email of the account")
    parser.add_argument("--password", required=True, help="New password")

    return parser.parse_args()


def reset_password() -> None:
    args = parse_args()

    try:
        user = AuthService.from_settings(get_settings()).reset_password(
            email=args.email,
            new_password=args.password,
        )
    except OrganizerError as exc:
        logger.error("Password reset failed", extra={"error": exc.message, "error_code": exc.error_code})
        sys.exit(1)

    logger.info("Password reset", extra={"user_id": user.user_id, "email": user.email})


if __name__ == "__main__":
    reset_password()
