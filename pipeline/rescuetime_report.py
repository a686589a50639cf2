#!/usr/bin/env python3
"""Render RescueTime daily reports into reports/rescuetime-report-<date>.md.

Runs for yesterday by default, for one --date, or for every day of a
--month. Dates whose report already exists are skipped without any API
call, so re-runs only fetch what is missing.
"""

# Standard Library
import argparse
import sys

# local repo modules
from digestlib import artifact_store
from digestlib import console_log
from digestlib import date_enumerator
from digestlib import fetch_result
from digestlib import pipeline_settings
from digestlib import report_renderer
from digestlib import rescuetime_client


log_step = console_log.make_log_step("rescuetime_report")


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Generate RescueTime Markdown reports for missing dates."
	)
	parser.add_argument(
		"date_positional",
		nargs="?",
		default="",
		metavar="YYYY-MM-DD",
		help="Optional single date (same as --date).",
	)
	mode_group = parser.add_mutually_exclusive_group()
	mode_group.add_argument(
		"--date",
		dest="date",
		default="",
		help="Generate the report for one YYYY-MM-DD date.",
	)
	mode_group.add_argument(
		"--month",
		dest="month",
		nargs="?",
		const="current",
		default=None,
		metavar="YYYY-MM",
		help="Generate reports for every day of a month (default: current month).",
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for defaults.",
	)
	parser.add_argument(
		"--root",
		default="",
		help="Working root holding reports/ (defaults from settings.yaml, else cwd).",
	)
	parser.add_argument(
		"--print",
		dest="print_report",
		action="store_true",
		help="Echo single-date reports to the console.",
	)
	args = parser.parse_args(argv)
	return args


#============================================
def resolve_target_dates(args: argparse.Namespace, today=None) -> list:
	"""
	Resolve the run mode into an ordered list of dates.
	"""
	if args.month is not None:
		month_value = None if args.month == "current" else args.month
		return date_enumerator.resolve_dates("month", month_value, today=today)
	date_value = args.date or args.date_positional
	if date_value:
		return date_enumerator.resolve_dates("date", date_value, today=today)
	return date_enumerator.resolve_dates("yesterday", today=today)


#============================================
def generate_report(client: rescuetime_client.RescueTimeClient, date_text: str) -> fetch_result.FetchResult:
	"""
	Fetch and render one day's report.

	A day with no tracked time yields the no-data report; a failed summary
	fetch is returned as a failure so nothing gets written.
	"""
	summary = client.fetch_daily_summary(date_text)
	if summary.failed:
		return summary
	if summary.no_data or summary.value is None:
		return fetch_result.empty(report_renderer.render_no_data_report(date_text))
	activities = client.fetch_activities(date_text)
	documents = client.fetch_hourly_documents(date_text)
	report = report_renderer.render_daily_report(
		summary.value,
		activities.value or [],
		documents.value or {},
	)
	return fetch_result.success(report)


#============================================
def generate_reports(
	store: artifact_store.ArtifactStore,
	client: rescuetime_client.RescueTimeClient,
	dates: list,
	log_fn=log_step,
	print_reports: bool = False,
) -> dict:
	"""
	Generate reports for each date in order, skipping existing artifacts.
	"""
	counts = {"skipped": 0, "written": 0, "failed": 0}
	store.ensure_directory(artifact_store.REPORTS)
	for day in dates:
		date_text = artifact_store.date_key(day)
		if store.exists(artifact_store.REPORTS, date_text):
			log_fn(f"Skipping {date_text} - report already exists")
			counts["skipped"] += 1
			continue
		log_fn(f"Processing {date_text}...")
		try:
			result = generate_report(client, date_text)
			if result.failed:
				log_fn(f"Fetch failed for {date_text} ({result.status}): {result.reason}")
				counts["failed"] += 1
				continue
			if print_reports:
				console_log.print_text(result.value)
			path = store.write(artifact_store.REPORTS, date_text, result.value)
		except (OSError, KeyError, IndexError, TypeError, ValueError) as error:
			log_fn(f"Error generating report for {date_text}: {error}")
			counts["failed"] += 1
			continue
		log_fn(f"Saved report for {date_text} to {path}")
		counts["written"] += 1
	return counts


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Run one report generation pass.
	"""
	args = parse_args(argv)
	settings, settings_path = pipeline_settings.load_settings(args.settings)
	log_step(f"Using settings file: {settings_path}")
	try:
		dates = resolve_target_dates(args)
	except ValueError as error:
		log_step(f"Error: invalid date argument: {error}")
		sys.exit(2)
	api_key = pipeline_settings.get_credential(settings, "RESCUETIME_API_KEY", ["rescuetime", "api_key"])
	timeout = pipeline_settings.get_setting_float(settings, ["http", "timeout_seconds"], 30.0)
	try:
		client = rescuetime_client.RescueTimeClient(api_key, log_fn=log_step, timeout=timeout)
	except fetch_result.MissingCredentialError as error:
		log_step(f"Error: {error}")
		sys.exit(1)
	store = artifact_store.ArtifactStore(pipeline_settings.resolve_root(settings, args.root))
	if len(dates) > 1:
		log_step(f"Generating reports for {dates[0].strftime('%B %Y')}...")
	counts = generate_reports(
		store,
		client,
		dates,
		log_fn=log_step,
		print_reports=args.print_report and len(dates) == 1,
	)
	log_step(
		f"Done: written={counts['written']}, skipped={counts['skipped']}, "
		+ f"failed={counts['failed']} in {store.directory_for(artifact_store.REPORTS)}"
	)
	log_step(f"RescueTime API usage: requests={client.request_count}")


if __name__ == "__main__":
	main()
