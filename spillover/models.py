"""
Data models for the spillover report
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from spillover.config import RunConfig


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _display_name(user: Any) -> Optional[str]:
    if isinstance(user, dict):
        return _text(user.get("displayName"))
    return None


def _name(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        return _text(item.get("name"))
    return None


def _names(items: Any) -> Tuple[str, ...]:
    if not isinstance(items, list):
        return ()
    return tuple(name for name in map(_name, items) if name)


@dataclass(frozen=True)
class Issue:
    """A JIRA issue as returned by the search API"""
    key: str
    issue_type: str
    status: str
    summary: str
    created: Optional[str]
    updated: Optional[str]
    resolved: Optional[str]
    assignee: Optional[str]
    reporter: Optional[str]
    project_key: str
    project_name: str
    fix_versions: Tuple[str, ...] = ()
    components: Tuple[str, ...] = ()
    labels: Tuple[str, ...] = ()
    resolution: Optional[str] = None
    story_points: Any = None
    sprint_field: Any = None
    epic_link: Any = None
    pair_field: Any = None

    @classmethod
    def from_api_response(cls, data: dict, config: RunConfig) -> 'Issue':
        """Create an Issue from a raw search result using the run's custom field IDs"""
        fields = data.get("fields")
        if not isinstance(fields, dict):
            fields = {}

        project = fields.get("project")
        if not isinstance(project, dict):
            project = {}
        labels = fields.get("labels")

        reporter = _display_name(fields.get("reporter"))
        if reporter is None:
            reporter = _display_name(fields.get("creator"))

        return cls(
            key=_text(data.get("key")) or "",
            issue_type=_name(fields.get("issuetype")) or "",
            status=_name(fields.get("status")) or "",
            summary=_text(fields.get("summary")) or "",
            created=_text(fields.get("created")),
            updated=_text(fields.get("updated")),
            resolved=_text(fields.get("resolutiondate")),
            assignee=_display_name(fields.get("assignee")),
            reporter=reporter,
            project_key=_text(project.get("key")) or "",
            project_name=_name(project) or "",
            fix_versions=_names(fields.get("fixVersions")),
            components=_names(fields.get("components")),
            labels=tuple(str(label) for label in labels) if isinstance(labels, list) else (),
            resolution=_name(fields.get("resolution")),
            story_points=fields.get(config.story_points_field),
            sprint_field=fields.get(config.sprint_field),
            epic_link=fields.get(config.epic_link_field),
            pair_field=fields.get(config.pair_field) if config.pair_field_configured else None,
        )


@dataclass(frozen=True)
class SprintInfo:
    """Sprint history derived from an issue's sprint field"""
    sprint_names: Tuple[str, ...] = ()

    @property
    def sprint_count(self) -> int:
        return len(self.sprint_names)

    @property
    def first_sprint(self) -> str:
        return self.sprint_names[0] if self.sprint_names else ""

    @property
    def last_sprint(self) -> str:
        return self.sprint_names[-1] if self.sprint_names else ""

    @property
    def all_sprints(self) -> str:
        return ", ".join(self.sprint_names)


@dataclass
class MultisprintIssue:
    """An issue that has been worked on in more than one sprint"""
    issue: Issue
    sprint_info: SprintInfo
    epic_link: str
