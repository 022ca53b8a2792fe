"""Command line entry point for the JIRA spillover report"""

import argparse
import logging
import re
import sys
import time
from dotenv import load_dotenv

from spillover.config import (
    DEFAULT_DAYS_PRIOR,
    DEFAULT_EPIC_LINK_FIELD,
    DEFAULT_EPIC_TITLE_FIELD,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_SPRINT_FIELD,
    DEFAULT_STORY_POINTS_FIELD,
    PROGRAM_NAME,
    PROGRAM_VERSION,
    RunConfig,
    env_setting,
)
from spillover.dates import resolve_days_prior
from spillover.errors import ConfigurationError, ProjectNotFoundError, SpilloverError
from spillover.exporter import write_report
from spillover.jira import (
    JiraClient,
    JiraFetcher,
    collect_spillover_issues,
    fetch_epic_titles,
    read_token_file,
    validate_project,
)
from spillover.logging_config import setup_logging

logger = logging.getLogger(__name__)

PROJECT_KEY_PATTERN = re.compile(r"^[A-Z0-9]+$")

EPILOG = """
Examples:
  jira-spillover-get --project EXPD --days-prior 14 --output-file spillover_report.tsv --log
  jira-spillover-get --token-file ~/tokens/jira.txt --url https://jira.company.com --project TEAM --from-date 2025-01-01
  jira-spillover-get --project EXPD --days-prior 7 --output-file weekly_report.tsv --append

Missing values are prompted for interactively unless --no-prompt is given.
The token file must contain a single line: username:api-token
"""


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Report JIRA issues that have been worked on in more than one sprint",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {PROGRAM_VERSION}")
    parser.add_argument("--token-file", help="File containing username:api-token (env: JIRA_TOKEN_FILE)")
    parser.add_argument("--url", help="JIRA base URL, e.g. https://jira.company.com (env: JIRA_BASE_URL)")
    parser.add_argument("--project", help="JIRA project key, e.g. EXPD")
    parser.add_argument("--from-date", help="Start date in yyyy-mm-dd format, overrides --days-prior")
    parser.add_argument("--days-prior", type=int,
                        help=f"Number of days prior to today to check (default: {DEFAULT_DAYS_PRIOR})")
    parser.add_argument("--output-file", help=f"Output file name (default: {DEFAULT_OUTPUT_FILE})")
    parser.add_argument("--append", action="store_true", help="Append to the output file instead of overwriting")
    parser.add_argument("--log", action="store_true", help="Also write a timestamped log file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--pair-field", help="Custom field holding pair programming data (env: JIRA_PAIR_FIELD)")
    parser.add_argument("--sprint-field", help=f"Sprint custom field (default: {DEFAULT_SPRINT_FIELD})")
    parser.add_argument("--epic-link-field", help=f"Epic link custom field (default: {DEFAULT_EPIC_LINK_FIELD})")
    parser.add_argument("--epic-title-field", help=f"Epic title custom field (default: {DEFAULT_EPIC_TITLE_FIELD})")
    parser.add_argument("--story-points-field",
                        help=f"Story points custom field (default: {DEFAULT_STORY_POINTS_FIELD})")
    parser.add_argument("--no-prompt", action="store_true", help="Fail instead of prompting for missing values")
    return parser.parse_args(argv)


def _ask(input_func, message: str) -> str:
    try:
        return input_func(message).strip()
    except EOFError:
        return ""


def _required(value, input_func, interactive: bool, message: str, name: str) -> str:
    if value:
        return value.strip()
    if interactive:
        value = _ask(input_func, message)
    if not value:
        raise ConfigurationError(f"{name} is required")
    return value


def prompt_date_window(input_func):
    """Ask for a from date, then for days prior when it is left blank"""
    from_date = _ask(input_func, "Enter a specific date to check from (yyyy-mm-dd), or leave blank: ")
    if from_date:
        return from_date, None

    days_input = _ask(input_func, f"Enter number of days prior to check from (default = {DEFAULT_DAYS_PRIOR}): ")
    if days_input:
        try:
            days = int(days_input)
            if days > 0:
                return None, days
        except ValueError:
            pass
        logger.warning(f"Invalid input '{days_input}'. Using default of {DEFAULT_DAYS_PRIOR} days")

    return None, DEFAULT_DAYS_PRIOR


def build_run_config(args: argparse.Namespace, input_func=input):
    """
    Resolve run settings from flags, environment and prompts

    Args:
        args: Parsed command line arguments
        input_func: Prompt function, replaced in tests

    Returns:
        Tuple of (RunConfig, token file path)
    """
    interactive = not args.no_prompt

    base_url = _required(args.url or env_setting("JIRA_BASE_URL"), input_func, interactive,
                         "Enter the JIRA base URL (e.g., https://jira.company.com): ", "JIRA base URL")
    token_file = _required(args.token_file or env_setting("JIRA_TOKEN_FILE"), input_func, interactive,
                           "Enter the path to your JIRA API token file: ", "Token file path")
    project_key = _required(args.project, input_func, interactive,
                            "Enter the JIRA Project ID (e.g., EXPD): ", "Project key").upper()

    if not PROJECT_KEY_PATTERN.match(project_key):
        raise ConfigurationError(f"Project key '{project_key}' must consist only of uppercase letters and numbers")

    from_date, days_prior = args.from_date, args.days_prior
    if from_date is None and days_prior is None and interactive:
        from_date, days_prior = prompt_date_window(input_func)
    days_prior = resolve_days_prior(from_date, days_prior)

    output_file = args.output_file
    if not output_file and interactive:
        output_file = _ask(input_func,
                           f"Enter the filename to save the results (default *overwrites* {DEFAULT_OUTPUT_FILE}): ")
    output_file = output_file or DEFAULT_OUTPUT_FILE

    config = RunConfig(
        base_url=base_url.rstrip("/"),
        project_key=project_key,
        days_prior=days_prior,
        output_file=output_file,
        append=args.append,
        pair_field=args.pair_field or env_setting("JIRA_PAIR_FIELD"),
        sprint_field=args.sprint_field or env_setting("JIRA_SPRINT_FIELD", DEFAULT_SPRINT_FIELD),
        epic_link_field=args.epic_link_field or env_setting("JIRA_EPIC_LINK_FIELD", DEFAULT_EPIC_LINK_FIELD),
        epic_title_field=args.epic_title_field or env_setting("JIRA_EPIC_TITLE_FIELD", DEFAULT_EPIC_TITLE_FIELD),
        story_points_field=args.story_points_field or env_setting("JIRA_STORY_POINTS_FIELD",
                                                                  DEFAULT_STORY_POINTS_FIELD),
        log_to_file=args.log,
        debug=args.debug,
    )

    logger.info(f"Using JIRA base URL: {config.base_url}")
    logger.info(f"Using project key: {config.project_key}")
    logger.info(f"Using output file: {config.output_file}{' (append)' if config.append else ''}")
    return config, token_file


def run_report(config: RunConfig, auth_token: str, client: JiraClient = None) -> int:
    """
    Validate the project, find spillover issues and write the report

    Returns:
        Process exit code
    """
    if client is None:
        client = JiraClient(config.base_url, auth_token)

    validate_project(client, config.project_key)

    logger.info("Fetching issues from JIRA...")
    fetcher = JiraFetcher(client, config)
    total_issues, multisprint_issues, epic_keys = collect_spillover_issues(fetcher, config)

    if total_issues == 0:
        logger.warning("No issues found matching the criteria")
        return 0

    epic_titles = fetch_epic_titles(client, epic_keys, config.epic_title_field)

    logger.info("Formatting output data...")
    summary = write_report(multisprint_issues, epic_titles, config)

    if config.pair_field_configured and summary.rows_written and not summary.pair_values_found:
        logger.warning(f"Pair field '{config.pair_field}' was not found on any spillover issue")

    print(f"\nSuccess! Processed {total_issues} issues and found {len(multisprint_issues)} spillover issues.")
    if config.append:
        print(f"Results appended to: {summary.path}")
    else:
        print(f"Results saved to: {summary.path}")
    return 0


def main(argv=None) -> int:
    load_dotenv()
    args = parse_args(argv)

    started = time.monotonic()
    setup_logging(log_to_file=args.log, debug=args.debug)
    print(f"\n{PROGRAM_NAME} v{PROGRAM_VERSION}")
    logger.info(f"Starting {PROGRAM_NAME} v{PROGRAM_VERSION}")

    try:
        config, token_file = build_run_config(args)
        auth_token = read_token_file(token_file)
        exit_code = run_report(config, auth_token)
    except ProjectNotFoundError as e:
        logger.error(f"Project validation failed: {e}")
        print(f"\nProject '{e.project_key}' not found in JIRA. Please verify the project key is correct.")
        exit_code = 1
    except SpilloverError as e:
        logger.error(str(e))
        exit_code = 1
    except OSError as e:
        logger.error(f"Failed to write output file: {e}")
        exit_code = 1

    elapsed = time.monotonic() - started
    print(f"\nExecution completed in {elapsed:.2f} seconds")
    logger.info(f"Execution completed in {elapsed:.2f} seconds")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
