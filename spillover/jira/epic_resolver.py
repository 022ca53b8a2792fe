"""Look up display titles for the epics referenced by spillover issues"""

import logging

from spillover.config import EPIC_LOOKUP_FAILED, EPIC_NO_TITLE
from spillover.errors import JiraAPIError

logger = logging.getLogger(__name__)


def fetch_epic_titles(client, epic_keys: list, epic_title_field: str) -> dict:
    """
    Retrieve the title of each epic, one request per key

    A failed lookup does not stop the batch; the key is recorded with the
    lookup-failed sentinel instead.

    Args:
        client: JiraClient instance
        epic_keys: Unique epic keys in first-seen order
        epic_title_field: Custom field holding the epic title

    Returns:
        Dictionary mapping epic key to title or sentinel
    """
    epic_titles = {}

    if not epic_keys:
        return epic_titles

    logger.info(f"Looking up {len(epic_keys)} unique Epic titles")

    for i, epic_key in enumerate(epic_keys, start=1):
        logger.info(f"Looking up Epic title {i} of {len(epic_keys)}: {epic_key}")

        try:
            epic = client.get_issue(epic_key, fields=[epic_title_field])
        except JiraAPIError as e:
            logger.warning(f"Failed to lookup Epic {epic_key}: {e}")
            epic_titles[epic_key] = EPIC_LOOKUP_FAILED
            continue

        if not isinstance(epic, dict) or not isinstance(epic.get("fields"), dict):
            logger.warning(f"Failed to parse Epic response for {epic_key}")
            epic_titles[epic_key] = EPIC_LOOKUP_FAILED
            continue

        title = epic["fields"].get(epic_title_field)
        if isinstance(title, str) and title:
            epic_titles[epic_key] = title
        else:
            epic_titles[epic_key] = EPIC_NO_TITLE

    failed = sum(1 for title in epic_titles.values() if title == EPIC_LOOKUP_FAILED)
    logger.info(f"Retrieved {len(epic_titles) - failed} Epic titles ({failed} failed)")
    return epic_titles
