import os
import re
from dataclasses import dataclass
from datetime import date

from digestlib import date_enumerator


#============================================
@dataclass(frozen=True)
class ArtifactCategory:
	"""
	One kind of dated Markdown artifact: where it lives and how it is named.
	"""
	name: str
	directory: str
	prefix: str

	#============================================
	def filename(self, date_text: str) -> str:
		return f"{self.prefix}-{date_text}.md"

	#============================================
	def filename_pattern(self) -> re.Pattern:
		return re.compile(rf"^{re.escape(self.prefix)}-(\d{{4}}-\d{{2}}-\d{{2}})\.md$")


REPORTS = ArtifactCategory("report", "reports", "rescuetime-report")
COMMITS = ArtifactCategory("commits", os.path.join("context", "commits"), "github-commits")
SUMMARIES = ArtifactCategory("summary", "summaries", "summary")


#============================================
def date_key(value) -> str:
	"""
	Normalize a date or ISO string to the yyyy-MM-dd artifact key.
	"""
	if isinstance(value, date):
		return date_enumerator.format_date(value)
	text = str(value or "").strip()
	# validates the key before it becomes part of a path
	date_enumerator.parse_date(text)
	return text


#============================================
class ArtifactStore:
	"""
	Directory-backed store of Markdown artifacts keyed by category and date.

	The presence of a file is the only cache signal; a stale or truncated
	file still counts as done.
	"""

	def __init__(self, root: str):
		self.root = os.path.abspath(root or ".")

	#============================================
	def directory_for(self, category: ArtifactCategory) -> str:
		return os.path.join(self.root, category.directory)

	#============================================
	def path_for(self, category: ArtifactCategory, value) -> str:
		"""
		Build the deterministic file path for one category and date.
		"""
		return os.path.join(self.directory_for(category), category.filename(date_key(value)))

	#============================================
	def ensure_directory(self, category: ArtifactCategory) -> str:
		directory = self.directory_for(category)
		os.makedirs(directory, exist_ok=True)
		return directory

	#============================================
	def exists(self, category: ArtifactCategory, value) -> bool:
		return os.path.isfile(self.path_for(category, value))

	#============================================
	def write(self, category: ArtifactCategory, value, content: str) -> str:
		"""
		Create or overwrite one artifact and return its path.
		"""
		self.ensure_directory(category)
		path = self.path_for(category, value)
		with open(path, "w", encoding="utf-8") as handle:
			handle.write(content)
		return path

	#============================================
	def read(self, category: ArtifactCategory, value) -> str:
		"""
		Read one artifact, returning an empty string when it is absent.
		"""
		path = self.path_for(category, value)
		if not os.path.isfile(path):
			return ""
		with open(path, "r", encoding="utf-8") as handle:
			return handle.read()

	#============================================
	def list_dates(self, category: ArtifactCategory) -> list[str]:
		"""
		List date keys present for one category, oldest first.
		"""
		directory = self.directory_for(category)
		if not os.path.isdir(directory):
			return []
		pattern = category.filename_pattern()
		dates = []
		for filename in os.listdir(directory):
			match = pattern.match(filename)
			if not match:
				continue
			if not os.path.isfile(os.path.join(directory, filename)):
				continue
			dates.append(match.group(1))
		dates.sort()
		return dates

	#============================================
	def read_all(self, category: ArtifactCategory, log_fn=None) -> list[tuple[str, str]]:
		"""
		Read every artifact of one category as (date, content), newest first.

		Unreadable files are logged and left out.
		"""
		entries = []
		for date_text in reversed(self.list_dates(category)):
			try:
				content = self.read(category, date_text)
			except (OSError, UnicodeDecodeError) as error:
				if log_fn is not None:
					log_fn(f"Error reading {self.path_for(category, date_text)}: {error}")
				continue
			entries.append((date_text, content))
		return entries
