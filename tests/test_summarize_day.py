import os
import sys

import pytest


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PIPELINE_DIR = os.path.join(REPO_ROOT, "pipeline")
if PIPELINE_DIR not in sys.path:
	sys.path.insert(0, PIPELINE_DIR)

import summarize_day
from digestlib import artifact_store
from digestlib import llm_client


#============================================
class FakeTransport:
	"""
	Record prompts and answer from a queue; an Exception entry is raised.
	"""
	def __init__(self, answers: list | None = None):
		self.answers = list(answers or [])
		self.prompts = []

	def generate_chat(self, system_message: str, prompt: str) -> str:
		self.prompts.append((system_message, prompt))
		answer = self.answers.pop(0) if self.answers else f"summary {len(self.prompts)}"
		if isinstance(answer, Exception):
			raise answer
		return answer


#============================================
def quiet(message: str) -> None:
	return None


#============================================
def test_pending_dates_oldest_first(tmp_path) -> None:
	store = artifact_store.ArtifactStore(str(tmp_path))
	for day in ("2025-04-22", "2025-04-20", "2025-04-21"):
		store.write(artifact_store.REPORTS, day, "report")
	assert summarize_day.pending_dates(store) == ["2025-04-20", "2025-04-21", "2025-04-22"]
	assert summarize_day.pending_dates(store, "2025-04-25") == ["2025-04-25"]


#============================================
def test_existing_summary_is_skipped(tmp_path) -> None:
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.write(artifact_store.REPORTS, "2025-04-25", "report")
	store.write(artifact_store.SUMMARIES, "2025-04-25", "done")
	transport = FakeTransport()
	counts = summarize_day.summarize_dates(store, transport, "SYSTEM", ["2025-04-25"], log_fn=quiet)
	assert counts["skipped"] == 1
	assert transport.prompts == []


#============================================
def test_missing_report_is_skipped(tmp_path) -> None:
	store = artifact_store.ArtifactStore(str(tmp_path))
	transport = FakeTransport()
	counts = summarize_day.summarize_dates(store, transport, "SYSTEM", ["2025-04-25"], log_fn=quiet)
	assert counts["missing_report"] == 1
	assert not store.exists(artifact_store.SUMMARIES, "2025-04-25")


#============================================
def test_failure_writes_sentinel_and_continues(tmp_path) -> None:
	"""
	A failed call still writes a summary and the next date proceeds.
	"""
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.write(artifact_store.REPORTS, "2025-04-24", "report 24")
	store.write(artifact_store.REPORTS, "2025-04-25", "report 25")
	transport = FakeTransport([RuntimeError("boom"), "good summary"])
	counts = summarize_day.summarize_dates(
		store, transport, "SYSTEM", ["2025-04-24", "2025-04-25"], log_fn=quiet
	)
	assert counts["written"] == 2
	assert store.read(artifact_store.SUMMARIES, "2025-04-24") == llm_client.SUMMARY_FAILURE_TEXT
	assert store.read(artifact_store.SUMMARIES, "2025-04-25") == "good summary"


#============================================
def test_new_summaries_feed_following_dates(tmp_path) -> None:
	"""
	A summary written in this run becomes context for the next date.
	"""
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.write(artifact_store.SUMMARIES, "2025-04-20", "older context")
	store.write(artifact_store.REPORTS, "2025-04-21", "report 21")
	store.write(artifact_store.REPORTS, "2025-04-22", "report 22")
	transport = FakeTransport(["first new", "second new"])
	summarize_day.summarize_dates(
		store, transport, "SYSTEM", ["2025-04-21", "2025-04-22"], log_fn=quiet
	)
	first_prompt = transport.prompts[0][1]
	second_prompt = transport.prompts[1][1]
	assert "older context" in first_prompt
	assert "first new" not in first_prompt
	assert second_prompt.index("2025-04-21:\nfirst new") < second_prompt.index("2025-04-20:\nolder context")
	assert transport.prompts[0][0] == "SYSTEM"


#============================================
def test_extra_context_is_appended(tmp_path) -> None:
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.write(artifact_store.REPORTS, "2025-04-25", "report")
	transport = FakeTransport()
	summarize_day.summarize_dates(
		store, transport, "SYSTEM", ["2025-04-25"], extra_context="\n\n## File: context/notes.md\n\nnotes", log_fn=quiet
	)
	assert transport.prompts[0][1].endswith("notes")


#============================================
def test_undecodable_report_counts_failed_and_continues(tmp_path) -> None:
	"""
	A report that is not UTF-8 fails its own date only.
	"""
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.ensure_directory(artifact_store.REPORTS)
	with open(store.path_for(artifact_store.REPORTS, "2025-04-20"), "wb") as handle:
		handle.write(b"\xff\xfe")
	store.write(artifact_store.REPORTS, "2025-04-21", "good report")
	transport = FakeTransport(["summary 21"])
	messages = []
	counts = summarize_day.summarize_dates(
		store, transport, "SYSTEM", ["2025-04-20", "2025-04-21"], log_fn=messages.append
	)
	assert counts["failed"] == 1
	assert counts["written"] == 1
	assert not store.exists(artifact_store.SUMMARIES, "2025-04-20")
	assert store.read(artifact_store.SUMMARIES, "2025-04-21") == "summary 21"
	assert any("Error reading inputs for 2025-04-20" in message for message in messages)


#============================================
def test_undecodable_summary_is_left_out_of_context(tmp_path) -> None:
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.ensure_directory(artifact_store.SUMMARIES)
	with open(store.path_for(artifact_store.SUMMARIES, "2025-04-19"), "wb") as handle:
		handle.write(b"\xff\xfe")
	store.write(artifact_store.REPORTS, "2025-04-20", "report 20")
	transport = FakeTransport(["summary 20"])
	counts = summarize_day.summarize_dates(store, transport, "SYSTEM", ["2025-04-20"], log_fn=quiet)
	assert counts["written"] == 1
	assert "2025-04-19" not in transport.prompts[0][1]


#============================================
def test_context_files_from_flag_or_settings() -> None:
	with_flag = summarize_day.parse_args(["--include-context-files"])
	without_flag = summarize_day.parse_args([])
	assert summarize_day.wants_context_files(with_flag, {})
	assert not summarize_day.wants_context_files(without_flag, {})
	assert summarize_day.wants_context_files(without_flag, {"summary": {"include_context_files": True}})


#============================================
def test_main_exits_without_api_key(tmp_path, monkeypatch) -> None:
	monkeypatch.delenv("OPENAI_API_KEY", raising=False)
	settings_path = tmp_path / "settings.yaml"
	settings_path.write_text("openai:\n  model: gpt-4o-mini\n", encoding="utf-8")
	with pytest.raises(SystemExit) as excinfo:
		summarize_day.main(["--settings", str(settings_path), "--root", str(tmp_path)])
	assert excinfo.value.code == 1
