"""Read JIRA credentials and build the Basic Auth token"""

import base64
import logging
from pathlib import Path

from spillover.errors import CredentialsError

logger = logging.getLogger(__name__)


def encode_credentials(credentials: str) -> str:
    """Base64 encode a username:api-token string for HTTP Basic Auth"""
    return base64.b64encode(credentials.encode("utf-8")).decode("ascii")


def read_token_file(token_file: str) -> str:
    """
    Read the JIRA API token from a file

    The file holds a single line in username:api-token format.

    Args:
        token_file: Path to the token file

    Returns:
        Base64 encoded credentials for the Authorization header
    """
    path = Path(token_file).expanduser()
    if not path.is_file():
        raise CredentialsError(f"Token file not found: {token_file}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CredentialsError(f"Failed to read token file: {e}", original_error=e) from e

    credentials = content.strip()
    if not credentials:
        raise CredentialsError("Token file is empty")

    if ":" not in credentials:
        logger.warning("API token might not be in expected format (username:token)")

    encoded = encode_credentials(credentials)
    logger.info("Successfully read and encoded API token")
    return encoded
