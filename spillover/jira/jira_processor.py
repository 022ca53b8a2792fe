"""Identify issues that have been worked on in more than one sprint"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from spillover.config import NO_EPIC, RunConfig
from spillover.dates import days_since, parse_jira_timestamp
from spillover.models import Issue, MultisprintIssue
from spillover.jira.sprint_parser import parse_sprint_field

logger = logging.getLogger(__name__)


def get_epic_link(epic_link_field) -> str:
    """Return the epic key, or the No Epic placeholder"""
    if isinstance(epic_link_field, str) and epic_link_field:
        return epic_link_field
    return NO_EPIC


def resolved_too_long_ago(issue: Issue, days_prior: int, now: Optional[datetime] = None) -> bool:
    """True when the issue was resolved before the look-back window"""
    resolved = parse_jira_timestamp(issue.resolved)
    if resolved is None:
        return False
    return days_since(resolved, now) > days_prior


def find_multisprint_issues(issues: List[Issue], days_prior: int,
                            now: Optional[datetime] = None) -> Tuple[List[MultisprintIssue], List[str]]:
    """
    Filter fetched issues down to multi-sprint spillovers

    Args:
        issues: Issues in fetch order
        days_prior: Size of the look-back window in days
        now: Reference time for the resolved-date check (defaults to now)

    Returns:
        Tuple of (spillover issues in fetch order, unique epic keys in first-seen order)
    """
    multisprint_issues = []
    epic_keys = {}

    for i, issue in enumerate(issues):
        if i % 100 == 0:
            logger.info(f"Processing issue {i + 1} of {len(issues)}: {issue.key}")

        if resolved_too_long_ago(issue, days_prior, now):
            logger.debug(f"Skipping {issue.key}: resolved more than {days_prior} days ago")
            continue

        sprint_info = parse_sprint_field(issue.sprint_field)
        if sprint_info.sprint_count <= 1:
            continue

        epic_link = get_epic_link(issue.epic_link)
        multisprint_issues.append(MultisprintIssue(
            issue=issue,
            sprint_info=sprint_info,
            epic_link=epic_link
        ))

        if epic_link != NO_EPIC:
            epic_keys.setdefault(epic_link, None)

    logger.info(f"Found {len(multisprint_issues)} issues that have been worked on in multiple sprints")
    return multisprint_issues, list(epic_keys)


def collect_spillover_issues(fetcher, config: RunConfig) -> Tuple[int, List[MultisprintIssue], List[str]]:
    """
    Fetch and classify issues for the configured project and window

    Args:
        fetcher: JiraFetcher instance
        config: Run configuration

    Returns:
        Tuple of (number of issues fetched, spillover issues, unique epic keys)
    """
    issues = fetcher.fetch_all_issues()
    if not issues:
        return 0, [], []

    logger.info(f"Processing {len(issues)} issues to identify multi-sprint items...")
    multisprint_issues, epic_keys = find_multisprint_issues(issues, config.days_prior)
    return len(issues), multisprint_issues, epic_keys
