"""Time-tracking records and the duration/score arithmetic behind reports."""

import re
from dataclasses import dataclass
from dataclasses import field


# (level, key, distribution label, per-activity label), most to least productive
PRODUCTIVITY_LEVELS = [
	(2, "very_productive", "Very productive", "very productive"),
	(1, "productive", "Productive", "productive"),
	(0, "neutral", "Neutral", "neutral"),
	(-1, "distracting", "Distracting", "distracting"),
	(-2, "very_distracting", "Very distracting", "very distracting"),
]
LEVEL_KEYS = {level: key for level, key, _, _ in PRODUCTIVITY_LEVELS}
HOUR_KEY_RE = re.compile(r"T(\d{2}):\d{2}:")
UNCLASSIFIED_HOUR = "unclassified"


#============================================
@dataclass
class DailyActivitySummary:
	"""
	One day of tracked time split across the five productivity levels.
	"""
	date: str
	total_seconds: float = 0.0
	level_seconds: dict = field(default_factory=dict)
	level_percentages: dict = field(default_factory=dict)
	productivity_pulse: float = 0
	source: str = ""

	#============================================
	@property
	def total_hours(self) -> float:
		return self.total_seconds / 3600

	#============================================
	def seconds_for(self, key: str) -> float:
		return float(self.level_seconds.get(key, 0) or 0)

	#============================================
	def percentage_for(self, key: str) -> float:
		return float(self.level_percentages.get(key, 0) or 0)


#============================================
@dataclass
class ActivityRecord:
	activity: str
	category: str
	productivity: int
	time_spent_seconds: float
	rank: int = 0
	number_of_people: int = 1


#============================================
@dataclass
class HourlyDocumentRecord:
	hour: str
	title: str
	application: str
	time_spent_seconds: float
	productivity: int


#============================================
def format_duration(seconds: float) -> str:
	"""
	Format seconds as 'Hh Mm', or just 'Mm' when there are no whole hours.
	"""
	total = int(seconds or 0)
	hours = total // 3600
	minutes = (total % 3600) // 60
	if hours == 0:
		return f"{minutes}m"
	return f"{hours}h {minutes}m"


#============================================
def productivity_label(level) -> str:
	for value, _, _, label in PRODUCTIVITY_LEVELS:
		if level == value:
			return label
	return "unknown"


#============================================
def clamp_score(value) -> int:
	"""
	Round a productivity score and clamp it into [0, 100].

	The provider occasionally reports fractional or out-of-range pulses.
	"""
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		return 0
	return min(100, max(0, int(round(value))))


#============================================
def compute_pulse(level_seconds: dict, total_seconds: float) -> int:
	"""
	Hour-normalized weighted productivity level offset to center on 50.

	round(sum(seconds * level) / (total_seconds / 3600) + 50), or 0 when
	nothing was tracked.
	"""
	if total_seconds <= 0:
		return 0
	weighted_sum = 0.0
	for level, key, _, _ in PRODUCTIVITY_LEVELS:
		weighted_sum += float(level_seconds.get(key, 0)) * level
	return int(round(weighted_sum / (total_seconds / 3600) + 50))


#============================================
def compute_percentages(level_seconds: dict, total_seconds: float) -> dict:
	percentages = {}
	for _, key, _, _ in PRODUCTIVITY_LEVELS:
		if total_seconds > 0:
			percentages[key] = float(level_seconds.get(key, 0)) / total_seconds * 100
		else:
			percentages[key] = 0.0
	return percentages


#============================================
def summary_from_feed(record: dict) -> DailyActivitySummary:
	"""
	Build a summary from one daily_summary_feed record.
	"""
	level_seconds = {}
	level_percentages = {}
	for _, key, _, _ in PRODUCTIVITY_LEVELS:
		level_seconds[key] = float(record.get(f"{key}_hours") or 0) * 3600
		level_percentages[key] = float(record.get(f"{key}_percentage") or 0)
	total_seconds = float(record.get("total_hours") or 0) * 3600
	return DailyActivitySummary(
		date=str(record.get("date") or ""),
		total_seconds=total_seconds,
		level_seconds=level_seconds,
		level_percentages=level_percentages,
		productivity_pulse=record.get("productivity_pulse"),
		source="daily_summary_feed",
	)


#============================================
def summary_from_interval_rows(date_text: str, rows: list) -> DailyActivitySummary:
	"""
	Reconstruct a summary from raw interval rows.

	Rows are [rank, seconds, people, activity, category, productivity];
	rows with a productivity level outside -2..2 count toward the total only.
	"""
	level_seconds = {key: 0.0 for key in LEVEL_KEYS.values()}
	total_seconds = 0.0
	for row in rows:
		seconds = float(row[1] or 0)
		total_seconds += seconds
		key = LEVEL_KEYS.get(row[5])
		if key is not None:
			level_seconds[key] += seconds
	return DailyActivitySummary(
		date=date_text,
		total_seconds=total_seconds,
		level_seconds=level_seconds,
		level_percentages=compute_percentages(level_seconds, total_seconds),
		productivity_pulse=compute_pulse(level_seconds, total_seconds),
		source="interval_data",
	)


#============================================
def activity_from_row(row: list) -> ActivityRecord:
	return ActivityRecord(
		rank=row[0],
		time_spent_seconds=float(row[1] or 0),
		number_of_people=row[2],
		activity=str(row[3]),
		category=str(row[4] or ""),
		productivity=row[5],
	)


#============================================
def dedupe_activities(rows: list) -> list[ActivityRecord]:
	"""
	Merge rows sharing an activity name and sort by descending time.
	"""
	grouped: dict[str, ActivityRecord] = {}
	for row in rows:
		record = activity_from_row(row)
		existing = grouped.get(record.activity)
		if existing is None:
			grouped[record.activity] = record
			continue
		existing.time_spent_seconds += record.time_spent_seconds
	activities = list(grouped.values())
	activities.sort(key=lambda item: item.time_spent_seconds, reverse=True)
	return activities


#============================================
def hour_key(value) -> str:
	"""
	Bucket a timestamp like "2025-04-25T14:37:00" into its hour, "14:00".

	Anything else lands in the unclassified bucket.
	"""
	match = HOUR_KEY_RE.search(str(value or ""))
	if not match:
		return UNCLASSIFIED_HOUR
	return f"{match.group(1)}:00"


#============================================
def group_documents_by_hour(rows: list) -> dict[str, list[HourlyDocumentRecord]]:
	"""
	Group document rows by hour, each hour sorted by descending time.
	"""
	hourly: dict[str, list[HourlyDocumentRecord]] = {}
	for row in rows:
		key = hour_key(row[0])
		record = HourlyDocumentRecord(
			hour=key,
			title=str(row[3]),
			application=str(row[4] or "") or "Unknown",
			time_spent_seconds=float(row[1] or 0),
			productivity=row[5],
		)
		hourly.setdefault(key, []).append(record)
	for records in hourly.values():
		records.sort(key=lambda item: item.time_spent_seconds, reverse=True)
	return hourly


#============================================
def sorted_hours(hourly: dict) -> list[str]:
	"""
	Sort hour keys ascending, keeping the unclassified bucket last.
	"""
	keys = sorted(key for key in hourly if key != UNCLASSIFIED_HOUR)
	if UNCLASSIFIED_HOUR in hourly:
		keys.append(UNCLASSIFIED_HOUR)
	return keys
