from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from typing import Any


STATUS_OK = "ok"
STATUS_NO_DATA = "no_data"
STATUS_REQUEST_FAILED = "request_failed"
STATUS_RATE_LIMITED = "rate_limited"

SUCCESS_STATUSES = {STATUS_OK, STATUS_NO_DATA}


#============================================
class MissingCredentialError(RuntimeError):
	"""
	Raised when a client is built without the credential it needs.
	"""


#============================================
@dataclass
class FetchResult:
	"""
	Value of one remote fetch plus the reason it may be incomplete.

	status is one of ok, no_data, request_failed, rate_limited. A failed
	fetch may still carry the partial value that was accumulated before
	the failure. A missing credential never produces a result; clients
	raise MissingCredentialError when they are built instead.
	"""
	value: Any = None
	status: str = STATUS_OK
	reason: str = ""

	#============================================
	@property
	def ok(self) -> bool:
		return self.status in SUCCESS_STATUSES

	#============================================
	@property
	def failed(self) -> bool:
		return not self.ok

	#============================================
	@property
	def no_data(self) -> bool:
		return self.status == STATUS_NO_DATA


#============================================
def success(value) -> FetchResult:
	return FetchResult(value=value, status=STATUS_OK)


#============================================
def empty(value, reason: str = "") -> FetchResult:
	return FetchResult(value=value, status=STATUS_NO_DATA, reason=reason)


#============================================
def failure(status: str, reason: str, value=None) -> FetchResult:
	"""
	Build a failed result, keeping any partial value.
	"""
	if status in SUCCESS_STATUSES:
		raise ValueError(f"Not a failure status: {status}")
	return FetchResult(value=value, status=status, reason=reason)


#============================================
def rate_limit_reset_text(headers) -> str:
	"""
	Convert the X-RateLimit-Reset epoch header to an ISO-8601 UTC string.
	"""
	headers = headers or {}
	raw_value = headers.get("X-RateLimit-Reset") or headers.get("x-ratelimit-reset")
	if not raw_value:
		return "unknown"
	try:
		reset_time = datetime.fromtimestamp(float(raw_value), tz=timezone.utc)
	except (TypeError, ValueError, OverflowError):
		return "unknown"
	return reset_time.isoformat()
