"""
OpenAI chat-completion transport and the degrade-and-continue summarizer.
"""

import requests

from digestlib import fetch_result


DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT_SECONDS = 120
SUMMARY_FAILURE_TEXT = "Failed to generate summary due to an API error."


class OpenAIChatTransport:
	name = "OpenAI"

	def __init__(
		self,
		api_key: str,
		model: str = DEFAULT_MODEL,
		temperature: float = DEFAULT_TEMPERATURE,
		base_url: str = DEFAULT_BASE_URL,
		session=None,
		timeout: float = DEFAULT_TIMEOUT_SECONDS,
	) -> None:
		if not (api_key or "").strip():
			raise fetch_result.MissingCredentialError(
				"OPENAI_API_KEY not found in environment variables or settings.yaml."
			)
		self.api_key = api_key.strip()
		self.model = model
		self.temperature = float(temperature)
		self.base_url = base_url.rstrip("/")
		self.session = session or requests.Session()
		self.timeout = timeout

	def _build_messages(self, system_message: str, prompt: str) -> list[dict[str, str]]:
		return [
			{"role": "system", "content": system_message},
			{"role": "user", "content": prompt},
		]

	def generate_chat(self, system_message: str, prompt: str) -> str:
		"""
		Send one chat completion and return the first choice, trimmed.
		"""
		payload: dict[str, object] = {
			"model": self.model,
			"messages": self._build_messages(system_message, prompt),
			"temperature": self.temperature,
		}
		response = self.session.post(
			f"{self.base_url}/chat/completions",
			json=payload,
			headers={
				"Content-Type": "application/json",
				"Authorization": f"Bearer {self.api_key}",
			},
			timeout=self.timeout,
		)
		if response.status_code >= 400:
			raise RuntimeError(f"OpenAI chat error: status {response.status_code}: {response.text[:200]}")
		parsed = response.json()
		choices = parsed.get("choices") or []
		if not choices:
			raise RuntimeError("OpenAI chat returned no choices")
		content = (choices[0].get("message") or {}).get("content") or ""
		return content.strip()


#============================================
def summarize(transport, system_template: str, prompt: str, log_fn=None) -> str:
	"""
	Generate one summary, returning the failure sentinel instead of raising.

	A bad day must not block the days after it, so request and
	response-shape failures are logged and replaced by SUMMARY_FAILURE_TEXT.
	"""
	try:
		return transport.generate_chat(system_template, prompt)
	except (requests.RequestException, RuntimeError, ValueError, AttributeError, TypeError) as error:
		if log_fn is not None:
			log_fn(f"Error calling OpenAI API: {error}")
		return SUMMARY_FAILURE_TEXT
