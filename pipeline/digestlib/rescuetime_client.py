import requests

from digestlib import activity_model
from digestlib import fetch_result


BASE_URL = "https://www.rescuetime.com/anapi"
DEFAULT_TIMEOUT_SECONDS = 30


#============================================
class RescueTimeClient:
	"""
	Thin requests wrapper around the RescueTime analytic API.
	"""

	def __init__(
		self,
		api_key: str,
		session=None,
		log_fn=None,
		timeout: float = DEFAULT_TIMEOUT_SECONDS,
		base_url: str = BASE_URL,
	):
		if not (api_key or "").strip():
			raise fetch_result.MissingCredentialError(
				"RESCUETIME_API_KEY not found in environment variables or settings.yaml."
			)
		self.api_key = api_key.strip()
		self.session = session or requests.Session()
		self.log_fn = log_fn
		self.timeout = timeout
		self.base_url = base_url.rstrip("/")
		self.request_count = 0

	#============================================
	def log(self, message: str) -> None:
		if self.log_fn is not None:
			self.log_fn(message)

	#============================================
	def get_json(self, endpoint: str, params: dict) -> fetch_result.FetchResult:
		"""
		Run one GET and classify its failure instead of raising.
		"""
		query = {"key": self.api_key, "format": "json"}
		query.update(params)
		url = f"{self.base_url}/{endpoint}"
		self.request_count += 1
		try:
			response = self.session.get(url, params=query, timeout=self.timeout)
		except requests.RequestException as error:
			self.log(f"Network error calling {endpoint}: {error}")
			return fetch_result.failure(fetch_result.STATUS_REQUEST_FAILED, str(error))
		if response.status_code == 403:
			reason = (
				f"RescueTime rate limit exceeded on {endpoint}; "
				+ f"reset_at={fetch_result.rate_limit_reset_text(response.headers)}"
			)
			self.log(reason)
			return fetch_result.failure(fetch_result.STATUS_RATE_LIMITED, reason)
		if response.status_code != 200:
			reason = f"Failed to fetch {endpoint}: status {response.status_code}"
			self.log(reason)
			return fetch_result.failure(fetch_result.STATUS_REQUEST_FAILED, reason)
		try:
			payload = response.json()
		except ValueError as error:
			self.log(f"Unreadable JSON from {endpoint}: {error}")
			return fetch_result.failure(fetch_result.STATUS_REQUEST_FAILED, str(error))
		return fetch_result.success(payload)

	#============================================
	def get_interval_rows(self, date_text: str, extra_params: dict) -> fetch_result.FetchResult:
		"""
		Fetch interval rows for one day; an empty row list is no_data.
		"""
		params = {
			"perspective": "interval",
			"restrict_begin": date_text,
			"restrict_end": date_text,
		}
		params.update(extra_params)
		result = self.get_json("data", params)
		if result.failed:
			return result
		payload = result.value if isinstance(result.value, dict) else {}
		rows = payload.get("rows") or []
		if not rows:
			return fetch_result.empty([], f"No interval rows for {date_text}")
		return fetch_result.success(rows)

	#============================================
	def fetch_daily_summary(self, date_text: str) -> fetch_result.FetchResult:
		"""
		Fetch one day's summary, rebuilding it from interval rows when the
		summary feed does not carry that date.
		"""
		self.log(f"Fetching data for {date_text}...")
		feed = self.get_json("daily_summary_feed", {"restrict_date": date_text})
		if feed.failed:
			return feed
		records = feed.value if isinstance(feed.value, list) else []
		for record in records:
			if isinstance(record, dict) and record.get("date") == date_text:
				return fetch_result.success(activity_model.summary_from_feed(record))

		self.log(f"No data found with daily summary feed, trying analytics API for {date_text}...")
		rows = self.get_interval_rows(date_text, {"resolution_time": "day"})
		if rows.failed:
			return rows
		if rows.no_data:
			self.log(f"No data found for {date_text} using either API method")
			return fetch_result.empty(None, rows.reason)
		self.log(f"Converting analytics data to summary format for {date_text}...")
		return fetch_result.success(
			activity_model.summary_from_interval_rows(date_text, rows.value)
		)

	#============================================
	def fetch_activities(self, date_text: str) -> fetch_result.FetchResult:
		"""
		Fetch named activities for one day, merged by name.
		"""
		rows = self.get_interval_rows(
			date_text,
			{"restrict_kind": "activity", "interval": "hour"},
		)
		if rows.failed:
			return fetch_result.failure(rows.status, rows.reason, [])
		if rows.no_data:
			return fetch_result.empty([])
		return fetch_result.success(activity_model.dedupe_activities(rows.value))

	#============================================
	def fetch_hourly_documents(self, date_text: str) -> fetch_result.FetchResult:
		"""
		Fetch window and tab titles for one day grouped by hour.
		"""
		self.log(f"Fetching detailed document data for {date_text}...")
		rows = self.get_interval_rows(
			date_text,
			{"restrict_kind": "document", "interval": "hour"},
		)
		if rows.failed:
			return fetch_result.failure(rows.status, rows.reason, {})
		if rows.no_data:
			return fetch_result.empty({})
		return fetch_result.success(activity_model.group_documents_by_hour(rows.value))
