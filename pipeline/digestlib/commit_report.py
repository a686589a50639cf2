from dataclasses import dataclass
from datetime import date
from datetime import datetime
from datetime import timezone
from urllib.parse import urlparse

from digestlib import date_enumerator


#============================================
@dataclass
class CommitRecord:
	"""
	One commit with the repository it belongs to.
	"""
	sha: str
	author: str
	date: str
	message: str
	url: str
	repo_name: str
	repo_full_name: str
	repo_url: str

	#============================================
	@property
	def short_sha(self) -> str:
		return self.sha[:7]

	#============================================
	@property
	def day_key(self) -> str:
		"""
		Local calendar date of the author timestamp.
		"""
		return parse_timestamp(self.date).astimezone().date().isoformat()


#============================================
def parse_timestamp(text: str) -> datetime:
	"""
	Parse a GitHub ISO timestamp into a timezone-aware datetime.
	"""
	parsed = datetime.fromisoformat((text or "").replace("Z", "+00:00"))
	if parsed.tzinfo is None:
		parsed = parsed.astimezone()
	return parsed


#============================================
def first_line(message: str) -> str:
	return (message or "").split("\n")[0]


#============================================
def format_timestamp(value) -> str:
	"""
	Render a PyGithub author date as ISO text; naive values are UTC.
	"""
	if value is None:
		return ""
	if isinstance(value, datetime):
		if value.tzinfo is None:
			value = value.replace(tzinfo=timezone.utc)
		return value.isoformat()
	return str(value)


#============================================
def repo_full_name_from_url(html_url: str) -> str:
	"""
	Read owner/repo out of a commit page URL like
	https://github.com/<owner>/<repo>/commit/<sha>.
	"""
	path = urlparse(html_url or "").path.strip("/")
	parts = path.split("/")
	if len(parts) < 2:
		return ""
	return f"{parts[0]}/{parts[1]}"


#============================================
def commit_from_github(commit_obj, repo_full_name: str = "") -> CommitRecord:
	"""
	Normalize one PyGithub Commit from a search result or a repository listing.

	Search results carry no repository object, so the repository is read
	from the commit URL when it is not given.
	"""
	git_commit = commit_obj.commit
	author = git_commit.author
	html_url = commit_obj.html_url or ""
	full_name = repo_full_name or repo_full_name_from_url(html_url)
	return CommitRecord(
		sha=commit_obj.sha or "",
		author=(author.name if author is not None else "") or "",
		date=format_timestamp(author.date if author is not None else None),
		message=first_line(git_commit.message),
		url=html_url,
		repo_name=full_name.split("/")[-1] if full_name else "",
		repo_full_name=full_name,
		repo_url=f"https://github.com/{full_name}" if full_name else "",
	)


#============================================
def drop_undated(commits: list[CommitRecord], log_fn=None) -> list[CommitRecord]:
	"""
	Keep only commits whose author date parses.
	"""
	kept = []
	for commit in commits:
		try:
			parse_timestamp(commit.date)
		except (TypeError, ValueError):
			if log_fn is not None:
				log_fn(f"Skipping commit {commit.short_sha or '?'} with unreadable date {commit.date!r}")
			continue
		kept.append(commit)
	return kept


#============================================
def sort_newest_first(commits: list[CommitRecord]) -> list[CommitRecord]:
	return sorted(commits, key=lambda commit: parse_timestamp(commit.date), reverse=True)


#============================================
def group_by_date_and_repo(commits: list[CommitRecord]) -> dict[str, dict[str, list[CommitRecord]]]:
	"""
	Group commits by author date, then by repository full name.

	Insertion order inside each level follows the input order.
	"""
	grouped: dict[str, dict[str, list[CommitRecord]]] = {}
	for commit in commits:
		repo_key = commit.repo_full_name or commit.repo_name
		day_bucket = grouped.setdefault(commit.day_key, {})
		day_bucket.setdefault(repo_key, []).append(commit)
	return grouped


#============================================
def render_commit_report(
	commits: list[CommitRecord],
	username: str,
	start: date,
	end: date,
) -> str:
	"""
	Render commit history grouped by date (newest first) and repository.
	"""
	ordered = sort_newest_first(commits)
	lines = [
		"# GitHub Commits Report - Last Month\n",
		f"Period: {date_enumerator.format_date(start)} to {date_enumerator.format_date(end)}\n",
		f"User: {username}\n",
		f"Total Commits: {len(ordered)}\n",
	]
	grouped = group_by_date_and_repo(ordered)
	for day in sorted(grouped, reverse=True):
		lines.append(f"## {day}")
		for repo_key, repo_commits in grouped[day].items():
			lines.append(f"### {repo_key}")
			for commit in repo_commits:
				lines.append(f"- [{commit.short_sha}]({commit.url}) {commit.message}")
			lines.append("")
	return "\n".join(lines)
