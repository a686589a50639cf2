import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from datetime import datetime
from datetime import timezone

import requests

from digestlib import commit_report
from digestlib import date_enumerator
from digestlib import fetch_result

try:
	import github
	from github import Auth
except ModuleNotFoundError as error:
	raise RuntimeError(
		"Missing dependency: PyGithub. Install with: pip install -e ."
	) from error


DEFAULT_PAGE_SIZE = 100
DEFAULT_PAGE_DELAY_SECONDS = 0.1
DEFAULT_TIMEOUT_SECONDS = 30
PLACEHOLDER_USERNAME = "your-github-username"
DEFAULT_MAX_WORKERS = 8
STRATEGY_SEARCH = "search"
STRATEGY_ENUMERATION = "enumeration"


#============================================
def build_github_api(
	token: str,
	page_size: int = DEFAULT_PAGE_SIZE,
	delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS,
	timeout: float = DEFAULT_TIMEOUT_SECONDS,
):
	"""
	Create one PyGithub client with retries disabled.

	per_page fixes the page size and seconds_between_requests puts the
	fixed delay between page requests.
	"""
	options = {
		"per_page": page_size,
		"seconds_between_requests": delay_seconds,
		"timeout": int(timeout),
		"retry": None,
	}
	if token:
		options["auth"] = Auth.Token(token)
	return github.Github(**options)


#============================================
def github_error_message(error: Exception) -> str:
	data = getattr(error, "data", None)
	if isinstance(data, dict) and data.get("message"):
		return str(data["message"])
	return str(error)


#============================================
class GitHubClient:
	"""
	Commit discovery for one user through PyGithub.

	Every listing is read through collect(), which keeps the items gathered
	before a failed page and reports the failure as a FetchResult status.
	"""

	def __init__(
		self,
		username: str,
		token: str,
		github_factory=None,
		log_fn=None,
		page_size: int = DEFAULT_PAGE_SIZE,
		delay_seconds: float = DEFAULT_PAGE_DELAY_SECONDS,
		max_workers: int = DEFAULT_MAX_WORKERS,
		timeout: float = DEFAULT_TIMEOUT_SECONDS,
	):
		username = (username or "").strip()
		if (not username) or (username == PLACEHOLDER_USERNAME):
			raise fetch_result.MissingCredentialError(
				"Please set GITHUB_USERNAME in the environment or github.username in settings.yaml."
			)
		self.username = username
		self.token = (token or "").strip()
		self.log_fn = log_fn
		self.page_size = int(page_size)
		self.delay_seconds = float(delay_seconds)
		self.max_workers = max(1, int(max_workers))
		self.timeout = timeout
		self.github_factory = github_factory or self._build_api
		self._thread_state = threading.local()
		self._api_call_count = 0
		self._api_calls_by_context: dict[str, int] = {}
		self._counter_lock = threading.Lock()
		if not self.token:
			self.log("No GITHUB_TOKEN found. Rate limits may apply.")
			self.log("Create a token with 'repo' scope at https://github.com/settings/tokens.")

	#============================================
	def _build_api(self):
		return build_github_api(self.token, self.page_size, self.delay_seconds, self.timeout)

	#============================================
	@property
	def api(self):
		"""
		PyGithub client owned by the calling thread.

		Worker threads never share one client and its HTTP session.
		"""
		api = getattr(self._thread_state, "api", None)
		if api is None:
			api = self.github_factory()
			self._thread_state.api = api
		return api

	#============================================
	def log(self, message: str) -> None:
		"""
		Emit one log line when logger is configured.
		"""
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def record_api_call(self, context: str) -> None:
		with self._counter_lock:
			self._api_call_count += 1
			if context not in self._api_calls_by_context:
				self._api_calls_by_context[context] = 0
			self._api_calls_by_context[context] += 1

	#============================================
	def api_usage_snapshot(self) -> dict:
		"""
		Return API call counters for reporting.
		"""
		with self._counter_lock:
			return {
				"api_call_count": self._api_call_count,
				"api_calls_by_context": dict(self._api_calls_by_context),
			}

	#============================================
	def _rate_limited(self, context: str, error: Exception, items: list) -> fetch_result.FetchResult:
		reset_text = fetch_result.rate_limit_reset_text(getattr(error, "headers", None))
		reason = f"GitHub API rate limit exceeded while {context}; reset_at={reset_text}"
		self.log(f"Rate limit exceeded: {reason}")
		return fetch_result.failure(fetch_result.STATUS_RATE_LIMITED, reason, items)

	#============================================
	def collect(self, context: str, fetch_fn, convert_fn=None) -> fetch_result.FetchResult:
		"""
		Iterate one paginated PyGithub listing into a FetchResult.

		A failure on any page stops the walk and keeps the items read so far.
		An item that cannot be converted is logged and skipped.
		"""
		self.record_api_call(context)
		items: list = []
		try:
			for obj in fetch_fn():
				if convert_fn is None:
					items.append(obj)
					continue
				try:
					items.append(convert_fn(obj))
				except (AttributeError, TypeError, ValueError) as error:
					self.log(f"Skipping malformed item from {context}: {error}")
		except github.RateLimitExceededException as error:
			return self._rate_limited(context, error, items)
		except github.GithubException as error:
			if error.status == 403:
				return self._rate_limited(context, error, items)
			reason = f"Error ({error.status}) from {context}: {github_error_message(error)}"
			self.log(f"Request failed after {len(items)} item(s): {reason}")
			return fetch_result.failure(fetch_result.STATUS_REQUEST_FAILED, reason, items)
		except requests.RequestException as error:
			reason = f"Network error from {context}: {error}"
			self.log(f"Request failed after {len(items)} item(s): {reason}")
			return fetch_result.failure(fetch_result.STATUS_REQUEST_FAILED, reason, items)
		return fetch_result.success(items)

	#============================================
	def search_commits(self, since: date) -> fetch_result.FetchResult:
		"""
		Find the user's commits across all repositories with the search API.
		"""
		since_text = date_enumerator.format_date(since)
		query = f"author:{self.username} committer-date:>={since_text}"
		self.log(f"Searching for commits with query: {query}")
		result = self.collect(
			"GET /search/commits",
			lambda: self.api.search_commits(query, sort="committer-date", order="desc"),
			commit_report.commit_from_github,
		)
		self.log(f"Found {len(result.value)} commits via search API.")
		return result

	#============================================
	def list_user_repositories(self) -> list[str]:
		result = self.collect(
			"GET /users/{user}/repos",
			lambda: self.api.get_user(self.username).get_repos(),
			lambda repo: repo.full_name,
		)
		return list(result.value)

	#============================================
	def list_user_organizations(self) -> list[str]:
		result = self.collect(
			"GET /users/{user}/orgs",
			lambda: self.api.get_user(self.username).get_orgs(),
			lambda org: org.login,
		)
		return list(result.value)

	#============================================
	def list_organization_repositories(self, org: str) -> list[str]:
		result = self.collect(
			"GET /orgs/{org}/repos",
			lambda: self.api.get_organization(org).get_repos(),
			lambda repo: repo.full_name,
		)
		return list(result.value)

	#============================================
	def list_repository_commits(self, owner: str, repo: str, since: date) -> list[commit_report.CommitRecord]:
		"""
		List the user's commits in one repository; failures yield what was
		collected, possibly nothing.
		"""
		full_name = f"{owner}/{repo}"
		since_time = datetime(since.year, since.month, since.day, tzinfo=timezone.utc)
		result = self.collect(
			"GET /repos/{owner}/{repo}/commits",
			lambda: self.api.get_repo(full_name, lazy=True).get_commits(author=self.username, since=since_time),
			lambda commit_obj: commit_report.commit_from_github(commit_obj, full_name),
		)
		return list(result.value)

	#============================================
	def enumerate_commits(self, since: date) -> list[commit_report.CommitRecord]:
		"""
		Fallback discovery: personal plus organization repositories, then
		per-repository commit lists fetched on a bounded worker pool.
		"""
		user_repos = self.list_user_repositories()
		self.log(f"Found {len(user_repos)} personal repositories")
		org_names = [name for name in self.list_user_organizations() if name]
		self.log(f"Found {len(org_names)} organizations: {', '.join(org_names)}")
		org_repos = []
		for org_name in org_names:
			org_repos.extend(self.list_organization_repositories(org_name))
		self.log(f"Found {len(org_repos)} repositories from organizations")

		targets = []
		for full_name in user_repos + org_repos:
			owner, _, name = (full_name or "").partition("/")
			if owner and name:
				targets.append((owner, name))
		self.log(f"Processing {len(targets)} total repositories with {self.max_workers} workers...")

		commits: list[commit_report.CommitRecord] = []
		with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
			futures = [
				executor.submit(self.list_repository_commits, owner, name, since)
				for owner, name in targets
			]
			for future in futures:
				commits.extend(future.result())
		return commits

	#============================================
	def discover_commits(self, since: date) -> tuple[str, list[commit_report.CommitRecord]]:
		"""
		Run search first and fall back to enumeration only when search finds
		nothing. The two strategies are never merged.
		"""
		searched = self.search_commits(since)
		if searched.value:
			self.log(f"Successfully found {len(searched.value)} commits via Search API.")
			return STRATEGY_SEARCH, list(searched.value)
		if searched.failed:
			self.log(f"Search API error ({searched.status}). Falling back to repository iteration approach.")
		self.log("Falling back to direct repository iteration approach...")
		return STRATEGY_ENUMERATION, self.enumerate_commits(since)
