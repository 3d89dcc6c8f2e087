"""Owner notifications — pushes booking and lead summaries to the site owner's inbox."""

import logging

import httpx

from michels_travel.config import settings

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 1200
CONTENT_MAX_LENGTH = 20000


async def notify_owner(title: str, content: str) -> bool:
    """Post a notification to the owner. Returns False (and logs) when unconfigured or failing."""
    if not settings.owner_notification_url:
        logger.info(f"Owner notification skipped (not configured): {title}")
        return False

    title = title.strip()[:TITLE_MAX_LENGTH]
    content = content.strip()[:CONTENT_MAX_LENGTH]
    if not title or not content:
        logger.warning("Owner notification skipped: empty title or content")
        return False

    headers = {"Content-Type": "application/json"}
    if settings.owner_notification_token:
        headers["Authorization"] = f"Bearer {settings.owner_notification_token}"

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.post(
                settings.owner_notification_url,
                json={"title": title, "content": content},
                headers=headers,
            )
            resp.raise_for_status()
            return True
    except httpx.HTTPError as e:
        logger.warning(f"Owner notification failed: {e}")
        return False
