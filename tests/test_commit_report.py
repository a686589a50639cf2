import os
import sys
from datetime import date
from datetime import datetime
from types import SimpleNamespace

import pytest


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
PIPELINE_DIR = os.path.join(REPO_ROOT, "pipeline")
if PIPELINE_DIR not in sys.path:
	sys.path.insert(0, PIPELINE_DIR)

import github_commits_report
from digestlib import artifact_store
from digestlib import commit_report
from digestlib import github_client


#============================================
def make_commit(sha: str, when: str, repo: str = "octocat/hello", message: str = "fix") -> commit_report.CommitRecord:
	return commit_report.CommitRecord(
		sha=sha,
		author="Dev",
		date=when,
		message=message,
		url=f"https://github.com/{repo}/commit/{sha}",
		repo_name=repo.split("/")[-1],
		repo_full_name=repo,
		repo_url=f"https://github.com/{repo}",
	)


#============================================
def test_first_line_only() -> None:
	assert commit_report.first_line("subject\n\nbody text") == "subject"
	assert commit_report.first_line(None) == ""


#============================================
def test_github_commit_reads_repository_from_url() -> None:
	"""
	Search results carry the repository only in the commit URL.
	"""
	author = SimpleNamespace(name="Dev", date=datetime(2025, 4, 20, 12, 0))
	commit_obj = SimpleNamespace(
		sha="abcdef1234567",
		html_url="https://github.com/acme/tool/commit/abcdef1234567",
		commit=SimpleNamespace(author=author, message="Add thing\nmore"),
	)
	commit = commit_report.commit_from_github(commit_obj)
	assert commit.repo_name == "tool"
	assert commit.repo_full_name == "acme/tool"
	assert commit.repo_url == "https://github.com/acme/tool"
	assert commit.message == "Add thing"
	assert commit.short_sha == "abcdef1"
	assert commit.date == "2025-04-20T12:00:00+00:00"


#============================================
def test_github_commit_without_author() -> None:
	commit_obj = SimpleNamespace(
		sha="abcdef1234567",
		html_url="https://github.com/acme/tool/commit/abcdef1234567",
		commit=SimpleNamespace(author=None, message="orphan"),
	)
	commit = commit_report.commit_from_github(commit_obj, "octocat/other")
	assert commit.repo_full_name == "octocat/other"
	assert commit.author == ""
	assert commit.date == ""


#============================================
def test_repo_full_name_from_url() -> None:
	assert commit_report.repo_full_name_from_url("https://github.com/acme/tool/commit/abc") == "acme/tool"
	assert commit_report.repo_full_name_from_url("https://github.com/") == ""
	assert commit_report.repo_full_name_from_url(None) == ""


#============================================
def test_drop_undated_logs_and_skips() -> None:
	messages = []
	commits = [
		make_commit("1111111aaaa", "2025-04-20T12:00:00Z"),
		make_commit("2222222bbbb", ""),
		make_commit("3333333cccc", "not a date"),
	]
	kept = commit_report.drop_undated(commits, log_fn=messages.append)
	assert [commit.sha for commit in kept] == ["1111111aaaa"]
	assert len(messages) == 2
	assert "2222222" in messages[0]


#============================================
def test_render_groups_newest_date_first() -> None:
	"""
	Dates descend; commits within a repository keep newest-first order.
	"""
	commits = [
		make_commit("1111111aaaa", "2025-04-20T12:00:00Z", message="older"),
		make_commit("2222222bbbb", "2025-04-22T12:00:00Z", message="newest"),
		make_commit("3333333cccc", "2025-04-22T10:00:00Z", repo="acme/tool", message="tool work"),
		make_commit("4444444dddd", "2025-04-20T13:00:00Z", message="later same day"),
	]
	text = commit_report.render_commit_report(commits, "octocat", date(2025, 4, 1), date(2025, 4, 25))
	assert text.startswith("# GitHub Commits Report - Last Month\n")
	assert "Period: 2025-04-01 to 2025-04-25\n" in text
	assert "User: octocat\n" in text
	assert "Total Commits: 4\n" in text
	assert text.index("## 2025-04-22") < text.index("## 2025-04-20")
	assert "### acme/tool" in text
	assert "- [2222222](https://github.com/octocat/hello/commit/2222222bbbb) newest" in text
	assert text.index("later same day") < text.index("older")


#============================================
def test_render_without_commits() -> None:
	text = commit_report.render_commit_report([], "octocat", date(2025, 4, 1), date(2025, 4, 1))
	assert "Total Commits: 0" in text
	assert "## " not in text


#============================================
class FakeGitHubClient:
	username = "octocat"

	def __init__(self, commits: list):
		self.commits = commits
		self.since_values = []

	def discover_commits(self, since):
		self.since_values.append(since)
		return github_client.STRATEGY_SEARCH, list(self.commits)


#============================================
def test_generate_commit_report_names_file_after_today(tmp_path) -> None:
	"""
	The report covers the month so far and is keyed by the run date.
	"""
	store = artifact_store.ArtifactStore(str(tmp_path))
	client = FakeGitHubClient([make_commit("5555555eeee", "2025-04-03T12:00:00Z")])
	path = github_commits_report.generate_commit_report(
		store, client, today=date(2025, 4, 25), log_fn=lambda message: None
	)
	assert path.endswith("github-commits-2025-04-25.md")
	assert client.since_values == [date(2025, 4, 1)]
	content = store.read(artifact_store.COMMITS, "2025-04-25")
	assert "Total Commits: 1" in content


#============================================
def test_generate_commit_report_overwrites(tmp_path) -> None:
	store = artifact_store.ArtifactStore(str(tmp_path))
	store.write(artifact_store.COMMITS, "2025-04-25", "stale")
	github_commits_report.generate_commit_report(
		store, FakeGitHubClient([]), today=date(2025, 4, 25), log_fn=lambda message: None
	)
	assert store.read(artifact_store.COMMITS, "2025-04-25") != "stale"


#============================================
def test_generate_commit_report_skips_undated_commit(tmp_path) -> None:
	"""
	A commit with an empty date is logged and the report is still written.
	"""
	store = artifact_store.ArtifactStore(str(tmp_path))
	client = FakeGitHubClient([
		make_commit("5555555eeee", "2025-04-03T12:00:00Z"),
		make_commit("6666666ffff", ""),
	])
	messages = []
	github_commits_report.generate_commit_report(
		store, client, today=date(2025, 4, 25), log_fn=messages.append
	)
	content = store.read(artifact_store.COMMITS, "2025-04-25")
	assert "Total Commits: 1" in content
	assert "6666666" not in content
	assert any("unreadable date" in message for message in messages)


#============================================
class BrokenGitHubClient(FakeGitHubClient):
	def discover_commits(self, since):
		raise AttributeError("'NoneType' object has no attribute 'author'")


#============================================
def test_main_logs_malformed_data_and_exits(tmp_path, monkeypatch) -> None:
	settings_path = tmp_path / "settings.yaml"
	settings_path.write_text("github:\n  username: octocat\n", encoding="utf-8")
	monkeypatch.setattr(
		github_commits_report, "build_client", lambda settings, user: BrokenGitHubClient([])
	)
	with pytest.raises(SystemExit) as excinfo:
		github_commits_report.main(["--settings", str(settings_path), "--root", str(tmp_path)])
	assert excinfo.value.code == 1
