"""Export spillover issues to a tab-separated report"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from spillover.config import (
    EPIC_NO_SUMMARY,
    NO_STORY_POINTS,
    OUTPUT_EXTENSION,
    OUTPUT_HEADER,
    PAIR_PLACEHOLDER,
    UNASSIGNED,
    UNKNOWN_REPORTER,
    RunConfig,
)
from spillover.dates import format_date
from spillover.models import MultisprintIssue

logger = logging.getLogger(__name__)


@dataclass
class ExportSummary:
    """Outcome of writing the report"""
    path: Path
    rows_written: int
    header_written: bool
    pair_values_found: int


def normalize_output_path(filename: str) -> Path:
    """Append the .tsv extension when it is missing"""
    if not filename.endswith(OUTPUT_EXTENSION):
        filename += OUTPUT_EXTENSION
    return Path(filename)


def _member_name(member: Any) -> Optional[str]:
    name = member.get("displayName") if isinstance(member, dict) else None
    return name if isinstance(name, str) and name else None


def _pair_from_member_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, list) and value and all(isinstance(member, dict) for member in value):
        # members without a display name contribute nothing
        return [name for name in map(_member_name, value) if name]
    return None


def _pair_from_member(value: Any) -> Optional[List[str]]:
    if isinstance(value, dict):
        name = _member_name(value)
        return [name] if name else []
    return None


def _pair_from_string_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, list) and all(isinstance(name, str) for name in value):
        return list(value)
    return None


def _pair_from_string(value: Any) -> Optional[List[str]]:
    if isinstance(value, str):
        return [value]
    return None


PAIR_DECODERS = [
    _pair_from_member_list,
    _pair_from_member,
    _pair_from_string_list,
    _pair_from_string,
]


def extract_pair_value(raw: Any) -> str:
    """
    Turn a raw pair field value into display text

    Accepts a list of user objects, a single user object, a list of
    strings or a plain string. Anything else gives an empty string.
    """
    if raw is None:
        return ""
    for decoder in PAIR_DECODERS:
        names = decoder(raw)
        if names is not None:
            return ", ".join(names)
    return ""


def format_story_points(value: Any) -> str:
    """Story points as raw text, with whole floats shown without a fraction"""
    if value is None:
        return NO_STORY_POINTS
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _clean(value: Any) -> str:
    """Keep each record on one line with a fixed number of fields"""
    text = "" if value is None else str(value)
    return text.replace("\r\n", " ").replace("\t", " ").replace("\r", " ").replace("\n", " ")


def build_row(multisprint_issue: MultisprintIssue, epic_titles: dict, config: RunConfig) -> list:
    """Build the output row for one spillover issue, in header order"""
    issue = multisprint_issue.issue
    sprint_info = multisprint_issue.sprint_info

    if config.pair_field_configured:
        pair = extract_pair_value(issue.pair_field)
    else:
        pair = PAIR_PLACEHOLDER

    row = [
        issue.issue_type,
        issue.key,
        issue.summary,
        issue.status,
        format_date(issue.updated),
        format_date(issue.created),
        format_date(issue.resolved),
        issue.assignee or UNASSIGNED,
        pair,
        issue.project_name,
        ", ".join(issue.fix_versions),
        ", ".join(issue.components),
        format_story_points(issue.story_points),
        multisprint_issue.epic_link,
        epic_titles.get(multisprint_issue.epic_link) or EPIC_NO_SUMMARY,
        ", ".join(issue.labels),
        issue.resolution or "",
        issue.reporter or UNKNOWN_REPORTER,
        sprint_info.sprint_count,
        sprint_info.first_sprint,
        sprint_info.last_sprint,
        sprint_info.all_sprints,
    ]
    return [_clean(value) for value in row]


def write_report(multisprint_issues: List[MultisprintIssue], epic_titles: dict,
                 config: RunConfig) -> ExportSummary:
    """
    Write spillover issues to the configured output file

    In append mode the header is only written when the file does not exist
    yet. An existing file, even an empty one, gets no header.

    Args:
        multisprint_issues: Spillover issues in fetch order
        epic_titles: Dictionary mapping epic key to title
        config: Run configuration (output file, append mode, pair field)

    Returns:
        ExportSummary for the write
    """
    output_file = normalize_output_path(config.output_file)

    if config.append:
        write_header = not output_file.exists()
        mode = "a"
        logger.info(f"Appending to file: {output_file}")
    else:
        write_header = True
        mode = "w"
        logger.info(f"Creating new file: {output_file}")

    pair_values_found = 0

    with open(output_file, mode, newline="", encoding="utf-8") as f:
        writer = csv.writer(f, delimiter="\t", lineterminator="\n",
                            quoting=csv.QUOTE_NONE, quotechar=None)
        if write_header:
            writer.writerow(OUTPUT_HEADER)

        for multisprint_issue in multisprint_issues:
            row = build_row(multisprint_issue, epic_titles, config)
            if config.pair_field_configured and row[8].strip():
                pair_values_found += 1
            writer.writerow(row)

    action = "appended" if config.append else "wrote"
    logger.info(f"Successfully {action} {len(multisprint_issues)} issues to {output_file}")

    return ExportSummary(
        path=output_file,
        rows_written=len(multisprint_issues),
        header_written=write_header,
        pair_values_found=pair_values_found
    )
