#!/usr/bin/env python3
"""Summarize daily reports with an LLM into summaries/summary-<date>.md.

Each prompt stacks the most recent previous summaries, that date's commit
history when present, and the day's RescueTime report. A failed API call
still writes a summary file holding the failure sentinel.
"""

# Standard Library
import argparse
import os
import sys

# local repo modules
from digestlib import artifact_store
from digestlib import console_log
from digestlib import context_aggregator
from digestlib import date_enumerator
from digestlib import fetch_result
from digestlib import llm_client
from digestlib import pipeline_settings


DEFAULT_PROMPT_PATH = "PROMPT.md"

log_step = console_log.make_log_step("summarize_day")


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Generate AI summaries for daily RescueTime reports."
	)
	parser.add_argument(
		"--date",
		dest="date",
		default="",
		help="Summarize one YYYY-MM-DD date (default: every report without a summary).",
	)
	parser.add_argument(
		"--settings",
		default="settings.yaml",
		help="YAML settings path for defaults.",
	)
	parser.add_argument(
		"--root",
		default="",
		help="Working root holding reports/, context/ and summaries/.",
	)
	parser.add_argument(
		"--prompt",
		dest="prompt_path",
		default="",
		help="System prompt template path (default: <root>/PROMPT.md).",
	)
	parser.add_argument(
		"--include-context-files",
		dest="include_context_files",
		action="store_true",
		help="Append every file under <root>/context/ as extra project context.",
	)
	args = parser.parse_args(argv)
	return args


#============================================
def build_transport(settings: dict) -> llm_client.OpenAIChatTransport:
	api_key = pipeline_settings.get_credential(settings, "OPENAI_API_KEY", ["openai", "api_key"])
	return llm_client.OpenAIChatTransport(
		api_key,
		model=pipeline_settings.get_setting_str(settings, ["openai", "model"], llm_client.DEFAULT_MODEL),
		temperature=pipeline_settings.get_setting_float(
			settings, ["openai", "temperature"], llm_client.DEFAULT_TEMPERATURE
		),
		base_url=pipeline_settings.get_setting_str(
			settings, ["openai", "base_url"], llm_client.DEFAULT_BASE_URL
		),
	)


#============================================
def wants_context_files(args: argparse.Namespace, settings: dict) -> bool:
	"""
	The CLI flag or settings.yaml summary.include_context_files turns it on.
	"""
	if args.include_context_files:
		return True
	return pipeline_settings.get_setting_bool(settings, ["summary", "include_context_files"], False)


#============================================
def pending_dates(store: artifact_store.ArtifactStore, date_text: str = "") -> list[str]:
	"""
	Resolve which report dates to summarize, oldest first.
	"""
	if date_text:
		return [artifact_store.date_key(date_text)]
	return store.list_dates(artifact_store.REPORTS)


#============================================
def summarize_dates(
	store: artifact_store.ArtifactStore,
	transport,
	system_template: str,
	dates: list[str],
	context_days: int = context_aggregator.DEFAULT_CONTEXT_DAYS,
	extra_context: str = "",
	log_fn=log_step,
) -> dict:
	"""
	Summarize each date in order; new summaries feed the next date's context.
	"""
	counts = {"skipped": 0, "written": 0, "missing_report": 0, "failed": 0}
	store.ensure_directory(artifact_store.SUMMARIES)
	summaries = context_aggregator.existing_summaries(store, log_fn=log_fn)
	for date_text in dates:
		if store.exists(artifact_store.SUMMARIES, date_text):
			log_fn(f"Skipping {date_text} - summary already exists")
			counts["skipped"] += 1
			continue
		try:
			prompt = context_aggregator.build_day_prompt(store, date_text, summaries, context_days)
		except (OSError, ValueError) as error:
			log_fn(f"Error reading inputs for {date_text}: {error}")
			counts["failed"] += 1
			continue
		if prompt is None:
			log_fn(f"Skipping {date_text} - report not found")
			counts["missing_report"] += 1
			continue
		log_fn(f"Processing {date_text}...")
		if extra_context:
			prompt = f"{prompt}\n\nAdditional project context:{extra_context}"
		summary = llm_client.summarize(transport, system_template, prompt, log_fn=log_fn)
		try:
			path = store.write(artifact_store.SUMMARIES, date_text, summary)
		except OSError as error:
			log_fn(f"Error writing summary for {date_text}: {error}")
			counts["failed"] += 1
			continue
		log_fn(f"Saved summary for {date_text} to {path}")
		summaries.insert(0, context_aggregator.DaySummary(date=date_text, content=summary))
		counts["written"] += 1
	return counts


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Run one summarization pass.
	"""
	args = parse_args(argv)
	settings, settings_path = pipeline_settings.load_settings(args.settings)
	log_step(f"Using settings file: {settings_path}")
	if args.date:
		try:
			date_enumerator.parse_date(args.date)
		except ValueError as error:
			log_step(f"Error: invalid --date value: {error}")
			sys.exit(2)
	try:
		transport = build_transport(settings)
	except fetch_result.MissingCredentialError as error:
		log_step(f"Error: {error}")
		sys.exit(1)
	root = pipeline_settings.resolve_root(settings, args.root)
	store = artifact_store.ArtifactStore(root)
	prompt_path = args.prompt_path or os.path.join(root, DEFAULT_PROMPT_PATH)
	system_template = context_aggregator.load_prompt_template(prompt_path, log_fn=log_step)
	extra_context = ""
	if wants_context_files(args, settings):
		files = context_aggregator.read_context_files(os.path.join(root, "context"), log_fn=log_step)
		extra_context = context_aggregator.format_context_files(files, root)
		log_step(f"Loaded {len(files)} context file(s)")
	dates = pending_dates(store, args.date)
	if not dates:
		log_step("No report files found.")
		return
	log_step(f"Found {len(dates)} report date(s).")
	counts = summarize_dates(
		store,
		transport,
		system_template,
		dates,
		context_days=pipeline_settings.get_setting_int(
			settings, ["summary", "context_days"], context_aggregator.DEFAULT_CONTEXT_DAYS
		),
		extra_context=extra_context,
		log_fn=log_step,
	)
	log_step(
		f"Done: written={counts['written']}, skipped={counts['skipped']}, "
		+ f"missing_report={counts['missing_report']}, failed={counts['failed']}"
	)


if __name__ == "__main__":
	main()
