"""Tests for the JIRA client, project validation and paginated fetch"""

import unittest
from unittest.mock import Mock, patch

import requests

from spillover.config import PAGE_SIZE, SEARCH_TIMEOUT, RunConfig
from spillover.errors import JiraAPIError, ProjectNotFoundError
from spillover.jira.jira_fetcher import JiraClient, JiraFetcher, build_jql, validate_project


def make_response(payload=None, status_code=200, json_error=None):
    response = Mock()
    response.status_code = status_code
    response.text = "" if payload is None else str(payload)
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def raw_issue(key, sprints=None):
    return {
        "key": key,
        "fields": {
            "issuetype": {"name": "Story"},
            "status": {"name": "In Progress"},
            "summary": f"Summary of {key}",
            "project": {"key": "EXPD", "name": "Expedition"},
            "customfield_14181": sprints,
        }
    }


class TestJiraClient(unittest.TestCase):
    """Test request construction and error conversion"""

    def setUp(self):
        self.client = JiraClient("https://jira.example.com/", "dXNlcjp0b2tlbg==")

    def test_headers_and_url(self):
        """Test the static Basic Auth header and trailing slash handling"""
        self.assertEqual(self.client.base_url, "https://jira.example.com")
        self.assertEqual(self.client.headers["Authorization"], "Basic dXNlcjp0b2tlbg==")
        self.assertEqual(self.client.headers["Accept"], "application/json")

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_search_issues_params(self, mock_get):
        """Test search sends jql, offset, page size, fields and the search timeout"""
        mock_get.return_value = make_response({"issues": [], "total": 0})

        self.client.search_issues("project = EXPD", start_at=200, fields=["summary", "status"])

        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "https://jira.example.com/rest/api/2/search")
        self.assertEqual(kwargs["params"], {
            "jql": "project = EXPD",
            "startAt": 200,
            "maxResults": PAGE_SIZE,
            "fields": "summary,status"
        })
        self.assertEqual(kwargs["timeout"], SEARCH_TIMEOUT)
        self.assertEqual(kwargs["headers"]["Authorization"], "Basic dXNlcjp0b2tlbg==")

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_non_200_raises(self, mock_get):
        """Test a non-200 status becomes JiraAPIError with the status code"""
        mock_get.return_value = make_response({"errorMessages": ["boom"]}, status_code=500)

        with self.assertRaises(JiraAPIError) as ctx:
            self.client.get("/rest/api/2/search")
        self.assertEqual(ctx.exception.status_code, 500)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_transport_error_raises(self, mock_get):
        """Test connection errors become JiraAPIError"""
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with self.assertRaises(JiraAPIError) as ctx:
            self.client.get("/rest/api/2/search")
        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.original_error, requests.exceptions.ConnectionError)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_invalid_json_raises(self, mock_get):
        """Test an undecodable body becomes JiraAPIError"""
        mock_get.return_value = make_response(json_error=ValueError("Expecting value"))

        with self.assertRaises(JiraAPIError):
            self.client.get("/rest/api/2/search")

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_get_issue_narrows_fields(self, mock_get):
        """Test issue lookups pass the field selection"""
        mock_get.return_value = make_response({"key": "EXPD-1", "fields": {}})

        self.client.get_issue("EXPD-1", fields=["customfield_14183"])

        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "https://jira.example.com/rest/api/2/issue/EXPD-1")
        self.assertEqual(kwargs["params"], {"fields": "customfield_14183"})


class TestValidateProject(unittest.TestCase):
    """Test project existence checks"""

    def setUp(self):
        self.client = JiraClient("https://jira.example.com", "token")

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_project_found(self, mock_get):
        """Test a matching project is returned"""
        mock_get.return_value = make_response({"key": "EXPD", "name": "Expedition"})

        project = validate_project(self.client, "EXPD")

        self.assertEqual(project["name"], "Expedition")
        self.assertEqual(mock_get.call_args[0][0], "https://jira.example.com/rest/api/2/project/EXPD")

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_project_not_found(self, mock_get):
        """Test HTTP 404 raises ProjectNotFoundError"""
        mock_get.return_value = make_response({"errorMessages": ["No project"]}, status_code=404)

        with self.assertRaises(ProjectNotFoundError) as ctx:
            validate_project(self.client, "NOPE")
        self.assertEqual(ctx.exception.project_key, "NOPE")
        self.assertEqual(ctx.exception.status_code, 404)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_project_forbidden(self, mock_get):
        """Test other statuses stay plain JiraAPIError"""
        mock_get.return_value = make_response({}, status_code=403)

        with self.assertRaises(JiraAPIError) as ctx:
            validate_project(self.client, "EXPD")
        self.assertNotIsInstance(ctx.exception, ProjectNotFoundError)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_project_key_mismatch(self, mock_get):
        """Test a response for a different key is rejected"""
        mock_get.return_value = make_response({"key": "OTHER", "name": "Other"})

        with self.assertRaises(JiraAPIError):
            validate_project(self.client, "EXPD")


class TestJiraFetcher(unittest.TestCase):
    """Test paginated issue retrieval"""

    def setUp(self):
        self.client = JiraClient("https://jira.example.com", "token")
        self.config = RunConfig(project_key="EXPD", days_prior=14, pair_field="customfield_22311")

    def test_build_jql(self):
        """Test the filter excludes epics, risks and sub tasks and bounds updated"""
        jql = build_jql("EXPD", 14)
        self.assertEqual(
            jql,
            "project = EXPD AND issuetype not in (Epic, Risk, 'Sub Task') "
            "AND Sprint is not EMPTY AND updated >= -14d"
        )

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_fetches_all_pages(self, mock_get):
        """Test pages are requested until the total is reached"""
        page_one = [raw_issue(f"EXPD-{i}") for i in range(100)]
        page_two = [raw_issue(f"EXPD-{i}") for i in range(100, 150)]
        mock_get.side_effect = [
            make_response({"issues": page_one, "total": 150, "startAt": 0}),
            make_response({"issues": page_two, "total": 150, "startAt": 100}),
        ]

        issues = JiraFetcher(self.client, self.config).fetch_all_issues()

        self.assertEqual(len(issues), 150)
        self.assertEqual(issues[0].key, "EXPD-0")
        self.assertEqual(issues[-1].key, "EXPD-149")
        self.assertEqual(mock_get.call_count, 2)
        offsets = [call[1]["params"]["startAt"] for call in mock_get.call_args_list]
        self.assertEqual(offsets, [0, 100])

        fields = mock_get.call_args_list[0][1]["params"]["fields"].split(",")
        self.assertIn("customfield_14181", fields)
        self.assertIn("customfield_22311", fields)
        jqls = {call[1]["params"]["jql"] for call in mock_get.call_args_list}
        self.assertEqual(len(jqls), 1)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_short_pages_advance_by_count(self, mock_get):
        """Test a server page cap below 100 does not skip issues"""
        mock_get.side_effect = [
            make_response({"issues": [raw_issue(f"EXPD-{i}") for i in range(50)], "total": 80}),
            make_response({"issues": [raw_issue(f"EXPD-{i}") for i in range(50, 80)], "total": 80}),
        ]

        issues = JiraFetcher(self.client, self.config).fetch_all_issues()

        self.assertEqual(len(issues), 80)
        self.assertEqual(mock_get.call_args_list[1][1]["params"]["startAt"], 50)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_empty_result(self, mock_get):
        """Test zero matches gives an empty list after one request"""
        mock_get.return_value = make_response({"issues": [], "total": 0})

        self.assertEqual(JiraFetcher(self.client, self.config).fetch_all_issues(), [])
        self.assertEqual(mock_get.call_count, 1)

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_failed_page_aborts(self, mock_get):
        """Test a failure on a later page raises with no partial result"""
        mock_get.side_effect = [
            make_response({"issues": [raw_issue(f"EXPD-{i}") for i in range(100)], "total": 250}),
            requests.exceptions.Timeout("read timed out"),
        ]

        with self.assertRaises(JiraAPIError):
            JiraFetcher(self.client, self.config).fetch_all_issues()

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_malformed_page_aborts(self, mock_get):
        """Test a page without an issues list raises"""
        mock_get.return_value = make_response({"total": 10})

        with self.assertRaises(JiraAPIError):
            JiraFetcher(self.client, self.config).fetch_all_issues()

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_missing_total_aborts(self, mock_get):
        """Test a page with a null or non-numeric total raises"""
        for total in (None, "250"):
            mock_get.return_value = make_response({"issues": [raw_issue("EXPD-1")], "total": total})

            with self.assertRaises(JiraAPIError):
                JiraFetcher(self.client, self.config).fetch_all_issues()

    @patch("spillover.jira.jira_fetcher.requests.get")
    def test_odd_field_shapes_tolerated(self, mock_get):
        """Test unexpected nested field shapes become empty values"""
        record = raw_issue("EXPD-1")
        record["fields"].update({
            "issuetype": "Story",
            "status": None,
            "summary": 42,
            "project": ["EXPD"],
            "fixVersions": [{"name": None}, {"name": "1.4"}, "1.5"],
            "components": [{"id": "10"}],
            "assignee": {"displayName": None},
            "resolution": {"name": 3},
            "resolutiondate": 20250701,
        })
        mock_get.return_value = make_response({"issues": [record], "total": 1})

        issue = JiraFetcher(self.client, self.config).fetch_all_issues()[0]

        self.assertEqual(issue.issue_type, "")
        self.assertEqual(issue.status, "")
        self.assertEqual(issue.summary, "")
        self.assertEqual(issue.project_name, "")
        self.assertEqual(issue.fix_versions, ("1.4",))
        self.assertEqual(issue.components, ())
        self.assertIsNone(issue.assignee)
        self.assertIsNone(issue.resolution)
        self.assertIsNone(issue.resolved)

if __name__ == "__main__":
    unittest.main()
