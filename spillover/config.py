"""Centralized configuration for the spillover report"""

import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Program
# =============================================================================

PROGRAM_NAME = "jira-spillover-get"
PROGRAM_VERSION = "0.0.6"


# =============================================================================
# JIRA Configuration
# =============================================================================

# Custom field IDs (Jira Data Center / Server defaults)
DEFAULT_STORY_POINTS_FIELD = "customfield_10002"
DEFAULT_SPRINT_FIELD = "customfield_14181"
DEFAULT_EPIC_LINK_FIELD = "customfield_14182"
DEFAULT_EPIC_TITLE_FIELD = "customfield_14183"

# Issues fetched per search request
PAGE_SIZE = 100

# Request timeouts (seconds)
METADATA_TIMEOUT = 30
SEARCH_TIMEOUT = 60

# Default look-back window
DEFAULT_DAYS_PRIOR = 10

# Issue types never reported
EXCLUDED_ISSUE_TYPES = ["Epic", "Risk", "'Sub Task'"]


# =============================================================================
# Sentinels
# =============================================================================

NO_EPIC = "No Epic"
EPIC_LOOKUP_FAILED = "Epic Title Lookup Failed"
EPIC_NO_TITLE = "No Epic Title"
EPIC_NO_SUMMARY = "No Epic Summary"
UNASSIGNED = "Unassigned"
UNKNOWN_REPORTER = "Unknown"
NO_STORY_POINTS = "N/A"
PAIR_PLACEHOLDER = "Pair"


# =============================================================================
# Output Configuration
# =============================================================================

OUTPUT_EXTENSION = ".tsv"
DEFAULT_OUTPUT_FILE = "spillover_rpt" + OUTPUT_EXTENSION

OUTPUT_HEADER = [
    "Issue Type",
    "Issue Key",
    "Summary",
    "Status",
    "Updated Date",
    "Created Date",
    "Resolved Date",
    "Assignee",
    "Pair",
    "Project",
    "Fix Versions",
    "Components",
    "Story Points",
    "Epic Link",
    "Epic Summary",
    "Labels",
    "Resolution",
    "Reporter",
    "Number of Sprints",
    "First Sprint",
    "Last Sprint",
    "All Sprints",
]


# =============================================================================
# Logging Configuration
# =============================================================================

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_TIMESTAMP = "%Y%m%d-%H%M%S"


@dataclass
class RunConfig:
    """Settings for a single report run"""

    base_url: str = ""
    project_key: str = ""
    days_prior: int = DEFAULT_DAYS_PRIOR
    output_file: str = DEFAULT_OUTPUT_FILE
    append: bool = False
    pair_field: Optional[str] = None
    sprint_field: str = DEFAULT_SPRINT_FIELD
    epic_link_field: str = DEFAULT_EPIC_LINK_FIELD
    epic_title_field: str = DEFAULT_EPIC_TITLE_FIELD
    story_points_field: str = DEFAULT_STORY_POINTS_FIELD
    log_to_file: bool = False
    debug: bool = False

    @property
    def pair_field_configured(self) -> bool:
        return bool(self.pair_field)

    def search_fields(self) -> list:
        """Field selection sent with every search page"""
        fields = [
            "issuetype", "summary", "status", "updated", "created", "resolutiondate",
            "assignee", "reporter", "creator", "project", "fixVersions", "components",
            "labels", "resolution", self.story_points_field, self.sprint_field,
            self.epic_link_field,
        ]
        if self.pair_field_configured:
            fields.append(self.pair_field)
        return fields


def env_setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read a stripped environment value, treating blanks as unset"""
    value = os.getenv(name, "").strip()
    return value or default
