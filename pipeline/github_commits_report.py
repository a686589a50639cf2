#!/usr/bin/env python3
"""Write this month's GitHub commit history to context/commits/.

Commits are discovered with the search API; repository enumeration is used
only when search finds nothing. The report is regenerated on every run and
named after the generation date.
"""

# Standard Library
import argparse
import sys

# local repo modules
from digestlib import artifact_store
from digestlib import commit_report
from digestlib import console_log
from digestlib import date_enumerator
from digestlib import fetch_result
from digestlib import github_client
from digestlib import pipeline_settings


log_step = console_log.make_log_step("github_commits_report")


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Generate the current month's GitHub commit history report."
	)
	parser.add_argument(
		"--user",
		default="",
		help="GitHub username (falls back to GITHUB_USERNAME then settings.yaml).",
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for defaults.",
	)
	parser.add_argument(
		"--root",
		default="",
		help="Working root holding context/commits/ (defaults from settings.yaml, else cwd).",
	)
	args = parser.parse_args(argv)
	return args


#============================================
def build_client(settings: dict, user_override: str = "") -> github_client.GitHubClient:
	"""
	Create the GitHub client from environment and settings values.
	"""
	username = (user_override or "").strip() or pipeline_settings.get_credential(
		settings, "GITHUB_USERNAME", ["github", "username"]
	)
	token = pipeline_settings.get_credential(settings, "GITHUB_TOKEN", ["github", "token"])
	return github_client.GitHubClient(
		username,
		token,
		log_fn=log_step,
		page_size=pipeline_settings.get_setting_int(settings, ["github", "page_size"], 100),
		delay_seconds=pipeline_settings.get_setting_float(settings, ["github", "page_delay_seconds"], 0.1),
		max_workers=pipeline_settings.get_setting_int(
			settings, ["github", "max_workers"], github_client.DEFAULT_MAX_WORKERS
		),
		timeout=pipeline_settings.get_setting_float(settings, ["http", "timeout_seconds"], 30.0),
	)


#============================================
def generate_commit_report(
	store: artifact_store.ArtifactStore,
	client: github_client.GitHubClient,
	today=None,
	log_fn=log_step,
) -> str:
	"""
	Discover this month's commits, render them, and write the report.

	Returns the written path.
	"""
	end_date = today or date_enumerator.today_local()
	start_date = date_enumerator.current_month_start(end_date)
	log_fn(
		f"Fetching commits for {client.username} from "
		+ f"{date_enumerator.format_date(start_date)} to {date_enumerator.format_date(end_date)}..."
	)
	strategy, commits = client.discover_commits(start_date)
	commits = commit_report.drop_undated(commits, log_fn=log_fn)
	log_fn(f"Found a total of {len(commits)} commits this month via {strategy}")
	report = commit_report.render_commit_report(commits, client.username, start_date, end_date)
	path = store.write(artifact_store.COMMITS, end_date, report)
	log_fn(f"Saved commit report to: {path}")
	return path


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Run one commit history generation pass.
	"""
	args = parse_args(argv)
	settings, settings_path = pipeline_settings.load_settings(args.settings)
	log_step(f"Using settings file: {settings_path}")
	try:
		client = build_client(settings, args.user)
	except fetch_result.MissingCredentialError as error:
		log_step(f"Error: {error}")
		sys.exit(1)
	store = artifact_store.ArtifactStore(pipeline_settings.resolve_root(settings, args.root))
	try:
		generate_commit_report(store, client)
	except (OSError, ValueError, TypeError, AttributeError, RuntimeError) as error:
		log_step(f"Error generating commit report: {error}")
		sys.exit(1)
	usage = client.api_usage_snapshot()
	log_step(f"GitHub API usage: calls={usage.get('api_call_count', 0)}")


if __name__ == "__main__":
	main()
