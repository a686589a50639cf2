"""Assemble the prompt context for one day's summary.

Pieces, in order: previous summaries (newest first), the commit history
artifact for the exact date when one exists, then the day's report.
"""

import os
from dataclasses import dataclass

from digestlib import artifact_store


DEFAULT_CONTEXT_DAYS = 3


#============================================
@dataclass
class DaySummary:
	date: str
	content: str


#============================================
def load_prompt_template(path: str, log_fn=None) -> str:
	"""
	Read the system prompt template, or return '' when it is unavailable.
	"""
	try:
		with open(path, "r", encoding="utf-8") as handle:
			return handle.read()
	except OSError as error:
		if log_fn is not None:
			log_fn(f"Error reading prompt template {path}: {error}")
		return ""


#============================================
def existing_summaries(store: artifact_store.ArtifactStore, log_fn=None) -> list[DaySummary]:
	"""
	Read every readable persisted summary, newest first.
	"""
	return [
		DaySummary(date=date_text, content=content)
		for date_text, content in store.read_all(artifact_store.SUMMARIES, log_fn=log_fn)
	]


#============================================
def recent_summaries(
	summaries: list[DaySummary],
	before: str | None = None,
	limit: int = DEFAULT_CONTEXT_DAYS,
) -> list[DaySummary]:
	"""
	Pick the newest summaries, optionally only those strictly before a date.
	"""
	ordered = sorted(summaries, key=lambda item: item.date, reverse=True)
	if before:
		ordered = [item for item in ordered if item.date < before]
	return ordered[:max(0, limit)]


#============================================
def format_previous_summaries(summaries: list[DaySummary]) -> str:
	if not summaries:
		return ""
	text = "Previous days summaries for extended context:\n\n"
	for summary in summaries:
		text += f"{summary.date}:\n{summary.content}\n\n"
	return text


#============================================
def format_commit_context(date_text: str, content: str) -> str:
	if not content:
		return ""
	return f"\n\nGitHub Commits for {date_text}:\n\n{content}"


#============================================
def build_prompt(report: str, previous: list[DaySummary], commits_text: str, date_text: str) -> str:
	"""
	Compose the user prompt for one date.
	"""
	previous_text = format_previous_summaries(previous)
	commits_context = format_commit_context(date_text, commits_text)
	return f"\n{previous_text}{commits_context}\n\nReport to summarize:\n\n{report}"


#============================================
def build_day_prompt(
	store: artifact_store.ArtifactStore,
	date_text: str,
	summaries: list[DaySummary],
	context_days: int = DEFAULT_CONTEXT_DAYS,
) -> str | None:
	"""
	Build the prompt for one date, or None when its report is missing.
	"""
	if not store.exists(artifact_store.REPORTS, date_text):
		return None
	report = store.read(artifact_store.REPORTS, date_text)
	commits_text = store.read(artifact_store.COMMITS, date_text)
	previous = recent_summaries(summaries, before=date_text, limit=context_days)
	return build_prompt(report, previous, commits_text, date_text)


#============================================
def read_context_files(context_root: str, log_fn=None) -> dict[str, str]:
	"""
	Read every file under the context root recursively.

	Unreadable files are logged and skipped.
	"""
	files: dict[str, str] = {}
	if not os.path.isdir(context_root):
		return files
	for directory, dirnames, filenames in os.walk(context_root):
		dirnames.sort()
		for filename in sorted(filenames):
			path = os.path.join(directory, filename)
			try:
				with open(path, "r", encoding="utf-8") as handle:
					files[path] = handle.read()
			except (OSError, UnicodeDecodeError) as error:
				if log_fn is not None:
					log_fn(f"Error reading file {path}: {error}")
	return files


#============================================
def format_context_files(files: dict[str, str], root: str) -> str:
	text = ""
	for path, content in files.items():
		relative = os.path.relpath(path, root)
		text += f"\n\n## File: {relative}\n\n{content}"
	return text
