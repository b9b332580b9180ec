"""One-time setup and teardown for the users load profile.

Setup verifies the API is reachable and creates a user reserved for update
traffic, so virtual users never collide on a record another one may delete.
Teardown removes that reserved user.
"""

import time
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
import structlog

from .metrics import Rate, checks

logger = structlog.get_logger("loadtest.session")

JSON_HEADERS = {"Content-Type": "application/json"}

SETUP_USER = {"name": "Setup User", "email": "setup@example.com"}


@dataclass
class SetupData:
    """State shared by every virtual user for the length of a run."""
    setup_user_id: Optional[int] = None


def new_user_payload(now_ms: Optional[int] = None) -> Dict[str, str]:
    """Build a create payload unique to the current millisecond."""
    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    return {"name": f"User {stamp}", "email": f"user-{stamp}@test.com"}


def update_payload(now_ms: Optional[int] = None) -> Dict[str, str]:
    stamp = int(time.time() * 1000) if now_ms is None else now_ms
    return {"name": f"Updated {stamp}"}


def setup(client: httpx.Client, rate: Rate = checks) -> SetupData:
    """Check reachability and create the reserved update-test user.

    If the API cannot be reached at all, the failed check is recorded and no
    reserved user is created, so virtual users skip the update step.
    Raises ``httpx.HTTPStatusError`` if the reserved user cannot be created.
    """
    try:
        response = client.get("/users")
    except httpx.TransportError as e:
        rate.add(False)
        logger.error("Setup: API is not reachable", base_url=str(client.base_url), error=str(e))
        return SetupData()

    reachable = response.status_code == 200
    rate.add(reachable)
    if not reachable:
        logger.error("Setup: API is not reachable", status=response.status_code)

    create_response = client.post("/users", json=SETUP_USER, headers=JSON_HEADERS)
    create_response.raise_for_status()
    setup_user_id = create_response.json()["id"]

    logger.info("Setup: created user for write tests", user_id=setup_user_id)
    return SetupData(setup_user_id=setup_user_id)


def teardown(client: httpx.Client, data: SetupData) -> None:
    """Delete the reserved user created by ``setup``."""
    if not data.setup_user_id:
        return
    response = client.delete(f"/users/{data.setup_user_id}")
    if response.status_code != 200:
        logger.warning(
            "Teardown: setup user was not deleted",
            user_id=data.setup_user_id,
            status=response.status_code,
        )
        return
    logger.info("Teardown: deleted setup user", user_id=data.setup_user_id)
    data.setup_user_id = None
