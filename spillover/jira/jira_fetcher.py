"""Fetch spillover candidate issues from the JIRA REST API"""

import logging
import requests

from spillover.config import (
    EXCLUDED_ISSUE_TYPES,
    METADATA_TIMEOUT,
    PAGE_SIZE,
    SEARCH_TIMEOUT,
    RunConfig,
)
from spillover.errors import JiraAPIError, ProjectNotFoundError
from spillover.models import Issue

logger = logging.getLogger(__name__)


class JiraClient:
    """JIRA REST API v2 client with a static Basic Auth header"""

    def __init__(self, base_url: str, auth_token: str):
        """
        Initialize JIRA client

        Args:
            base_url: JIRA instance URL (e.g., https://jira.company.com)
            auth_token: Base64 encoded username:api-token
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Basic {auth_token}",
            "Accept": "application/json"
        }

    def get(self, endpoint: str, params: dict = None, timeout: int = METADATA_TIMEOUT) -> dict:
        """
        Make a GET request to JIRA API

        Args:
            endpoint: API endpoint (e.g., /rest/api/2/search)
            params: Query parameters
            timeout: Request timeout in seconds

        Returns:
            JSON response as dictionary

        Raises:
            JiraAPIError: on transport failure, non-200 status or invalid JSON
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=params,
                timeout=timeout
            )
        except requests.exceptions.RequestException as e:
            raise JiraAPIError(f"Request to {endpoint} failed: {e}", original_error=e) from e

        if response.status_code != 200:
            raise JiraAPIError(
                f"HTTP {response.status_code} from {endpoint}",
                status_code=response.status_code,
                details=response.text[:500]
            )

        try:
            return response.json()
        except ValueError as e:
            raise JiraAPIError(
                f"Invalid JSON response from {endpoint}: {e}",
                status_code=response.status_code,
                original_error=e
            ) from e

    def search_issues(self, jql: str, start_at: int = 0, max_results: int = PAGE_SIZE,
                      fields: list = None) -> dict:
        """
        Search for issues using JQL with offset pagination

        Args:
            jql: JQL query string
            start_at: Zero-based index of the first issue to return
            max_results: Maximum results per page
            fields: List of fields to return

        Returns:
            Search results with issues and total count
        """
        params = {
            "jql": jql,
            "startAt": start_at,
            "maxResults": max_results
        }
        if fields:
            params["fields"] = ",".join(fields)

        return self.get("/rest/api/2/search", params, timeout=SEARCH_TIMEOUT)

    def get_project(self, project_key: str) -> dict:
        """Fetch project metadata, raising ProjectNotFoundError on 404"""
        try:
            return self.get(f"/rest/api/2/project/{project_key}")
        except JiraAPIError as e:
            if e.status_code == 404:
                raise ProjectNotFoundError(project_key, original_error=e) from e
            raise

    def get_issue(self, issue_key: str, fields: list = None) -> dict:
        """Fetch a single issue, optionally narrowed to some fields"""
        params = {"fields": ",".join(fields)} if fields else None
        return self.get(f"/rest/api/2/issue/{issue_key}", params)


def validate_project(client: JiraClient, project_key: str) -> dict:
    """
    Check that a project exists and the user can access it

    Returns:
        Project metadata from JIRA
    """
    project = client.get_project(project_key)

    if not isinstance(project, dict) or project.get("key") != project_key:
        found = project.get("key") if isinstance(project, dict) else None
        raise JiraAPIError(
            f"Project key mismatch: expected '{project_key}', got '{found}'",
            details={"project_key": project_key}
        )

    logger.info(f"Project '{project_key}' found: {project.get('name')}")
    return project


def build_jql(project_key: str, days_prior: int) -> str:
    """Build the JQL for sprinted issues updated within the window"""
    excluded = ", ".join(EXCLUDED_ISSUE_TYPES)
    jql = (
        f"project = {project_key} AND issuetype not in ({excluded}) "
        f"AND Sprint is not EMPTY AND updated >= -{days_prior}d"
    )
    logger.info(f"Using JQL query: {jql}")
    return jql


class JiraFetcher:
    """Fetches all spillover candidate issues for a project"""

    def __init__(self, client: JiraClient, config: RunConfig):
        """
        Initialize JIRA fetcher

        Args:
            client: JiraClient instance
            config: Run configuration (project, window, custom field IDs)
        """
        self.client = client
        self.config = config

    def fetch_all_issues(self) -> list:
        """
        Fetch every matching issue, one page at a time

        Any failed page aborts the whole fetch.

        Returns:
            List of Issue objects in the order JIRA returned them
        """
        jql = build_jql(self.config.project_key, self.config.days_prior)
        fields = self.config.search_fields()

        issues = []
        start_at = 0
        page_num = 1

        while True:
            logger.info(f"Fetching batch {page_num}, starting at record {start_at}...")

            result = self.client.search_issues(
                jql=jql,
                start_at=start_at,
                max_results=PAGE_SIZE,
                fields=fields
            )

            batch_issues = result.get("issues") if isinstance(result, dict) else None
            if not isinstance(batch_issues, list):
                raise JiraAPIError(f"Malformed search response for batch {page_num}: missing issues list")

            total = result.get("total", 0)
            if not isinstance(total, int):
                raise JiraAPIError(f"Malformed search response for batch {page_num}: total is {total!r}")

            for raw in batch_issues:
                if not isinstance(raw, dict):
                    raise JiraAPIError(f"Malformed issue record in batch {page_num}")
                issues.append(Issue.from_api_response(raw, self.config))

            logger.info(f"Fetched {len(batch_issues)} issues (Total: {len(issues)}/{total})")

            start_at += len(batch_issues)
            if not batch_issues or start_at >= total:
                break

            page_num += 1

        logger.info(f"Completed fetching {len(issues)} issues in {page_num} batches")
        return issues
