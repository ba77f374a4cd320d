#!/usr/bin/env python3
"""
Seed script to populate a demo library via API endpoints.

Signs up (or logs in) a demo user, creates a small folder tree and uploads
generated sample images with tags.

Run:
    python seed/seed_library.py --api-id <API-ID>
    python seed/seed_library.py --base-url https://<api>.execute-api.<region>.amazonaws.com/prod
"""

import argparse
import base64
import struct
import sys
import zlib
from typing import Any, cast

from aws_lambda_powertools import Logger
import requests

logger = Logger(service="seed")

LOCALSTACK_API_URL = "http://localhost:4566/restapis/{0}/snd/_user_request_"
REQUEST_TIMEOUT = 30

DEMO_USER = {
    "name": "Demo User",
    "email": "demo@example.com",
    "password": "demo-password",
}

# (folder name, parent folder name or None, color)
FOLDERS: list[tuple[str, str | None, str]] = [
    ("Vacation", None, "#10B981"),
    ("Beach", "Vacation", "#0EA5E9"),
    ("Mountains", "Vacation", "#6366F1"),
    ("Work", None, "#F59E0B"),
]

# (file name, folder name or None, tags, rgb)
IMAGES: list[tuple[str, str | None, str, tuple[int, int, int]]] = [
    ("beach.png", "Beach", "summer, sea, sand", (14, 165, 233)),
    ("sunset.png", "Beach", "summer, sunset", (249, 115, 22)),
    ("peak.png", "Mountains", "hiking, snow", (226, 232, 240)),
    ("whiteboard.png", "Work", "meeting", (255, 255, 255)),
    ("avatar.png", None, "profile", (59, 130, 246)),
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a demo image library via the Image Organizer API")

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--api-id",
        help="API Gateway ID (LocalStack)",
    )
    target.add_argument(
        "--base-url",
        help="Full API base URL of a deployed stage",
    )
    parser.add_argument("--email", default=DEMO_USER["email"], help="Demo user email")
    parser.add_argument("--password", default=DEMO_USER["password"], help="Demo user password")

    return parser.parse_args()


def solid_png(rgb: tuple[int, int, int], size: int = 8) -> bytes:
    """Encode a ``size`` x ``size`` single-color PNG."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body) & 0xFFFFFFFF)

    header = struct.pack(">IIBBBBB", size, size, 8, 2, 0, 0, 0)
    row = b"\x00" + bytes(rgb) * size
    pixels = zlib.compress(row * size)

    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", pixels) + chunk(b"IEND", b"")


def authenticate(base_url: str, email: str, password: str) -> str:
    """Sign up the demo user, falling back to login when it already exists."""
    signup = requests.post(
        f"{base_url}/auth/signup",
        json={**DEMO_USER, "email": email, "password": password},
        timeout=REQUEST_TIMEOUT,
    )

    if signup.status_code == 201:
        logger.info("Demo user created", extra={"email": email})
        return cast(str, signup.json()["token"])

    login = requests.post(
        f"{base_url}/auth/login",
        json={"email": email, "password": password},
        timeout=REQUEST_TIMEOUT,
    )
    login.raise_for_status()

    logger.info("Demo user logged in", extra={"email": email})
    return cast(str, login.json()["token"])


def create_folders(base_url: str, headers: dict[str, str]) -> dict[str, str]:
    folder_ids: dict[str, str] = {}

    for name, parent, color in FOLDERS:
        payload: dict[str, Any] = {"name": name, "color": color}
        if parent:
            payload["parent"] = folder_ids[parent]

        response = requests.post(
            f"{base_url}/folders",
            headers=headers,
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
        response_json = cast(dict[str, Any], response.json())

        if response.status_code == 201:
            folder_ids[name] = response_json["data"]["id"]
            logger.info("Seeded folder", extra={"folder": response_json["data"]["path"]})
        else:
            logger.error(
                "Failed to seed folder",
                extra={"folder": name, "status": response.status_code, "response": response_json},
            )

    return folder_ids


def upload_images(base_url: str, headers: dict[str, str], folder_ids: dict[str, str]) -> None:
    for file_name, folder, tags, rgb in IMAGES:
        payload: dict[str, Any] = {
            "file": base64.b64encode(solid_png(rgb)).decode("utf-8"),
            "file_name": file_name,
            "tags": tags,
        }
        if folder and folder in folder_ids:
            payload["folder_id"] = folder_ids[folder]

        response = requests.post(
            f"{base_url}/images/upload",
            headers=headers,
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
        response_json = cast(dict[str, Any], response.json())

        if response.status_code == 201:
            logger.info(
                "Seeded image",
                extra={"image": file_name, "image_id": response_json["data"]["id"]},
            )
        else:
            logger.error(
                "Failed to seed image",
                extra={"image": file_name, "status": response.status_code, "response": response_json},
            )


def seed_library() -> None:
    try:
        args = parse_args()
        base_url = (args.base_url or LOCALSTACK_API_URL.format(args.api_id)).rstrip("/")

        logger.info("Starting seeding process", extra={"api_base_url": base_url})

        token = authenticate(base_url, args.email, args.password)
        headers = {"Authorization": f"Bearer {token}"}

        folder_ids = create_folders(base_url, headers)
        upload_images(base_url, headers, folder_ids)

        listing = requests.get(
            f"{base_url}/images",
            headers=headers,
            params={"limit": 100},
            timeout=REQUEST_TIMEOUT,
        )
        logger.info(
            "Seeding completed",
            extra={"status": listing.status_code, "total": listing.json().get("pagination", {}).get("total")},
        )

    except Exception as exc:
        logger.exception("Seeding failed", exc_info=exc)
        sys.exit(1)


if __name__ == "__main__":
    seed_library()
