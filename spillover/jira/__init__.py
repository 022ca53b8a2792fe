"""JIRA data fetching and processing"""

from .auth import read_token_file, encode_credentials
from .jira_fetcher import JiraClient, JiraFetcher, build_jql, validate_project
from .jira_processor import find_multisprint_issues, collect_spillover_issues, get_epic_link
from .sprint_parser import parse_sprint_field
from .epic_resolver import fetch_epic_titles
