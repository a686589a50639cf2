import calendar
from datetime import date
from datetime import datetime
from datetime import timedelta


DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"


#============================================
def format_date(value: date) -> str:
	"""
	Format a calendar date as ISO yyyy-MM-dd.
	"""
	return value.strftime(DATE_FORMAT)


#============================================
def parse_date(text: str) -> date:
	"""
	Parse a strict ISO yyyy-MM-dd date string.
	"""
	return datetime.strptime((text or "").strip(), DATE_FORMAT).date()


#============================================
def today_local() -> date:
	return datetime.now().date()


#============================================
def yesterday(today: date | None = None) -> date:
	"""
	Return the local calendar day before today.
	"""
	base = today or today_local()
	return base - timedelta(days=1)


#============================================
def current_month_start(today: date | None = None) -> date:
	base = today or today_local()
	return base.replace(day=1)


#============================================
def month_days(year: int, month: int) -> list[date]:
	"""
	Return every calendar day of one month, ascending.

	Future days are included; downstream fetches just come back empty.
	"""
	_, last_day = calendar.monthrange(year, month)
	return [date(year, month, day) for day in range(1, last_day + 1)]


#============================================
def parse_month(text: str) -> tuple[int, int]:
	"""
	Parse a YYYY-MM month string into (year, month).
	"""
	parsed = datetime.strptime((text or "").strip(), MONTH_FORMAT)
	return parsed.year, parsed.month


#============================================
def resolve_dates(mode: str, value: str | None = None, today: date | None = None) -> list[date]:
	"""
	Resolve the ordered list of target dates for one run mode.

	mode is one of 'yesterday', 'date' or 'month'.
	"""
	base = today or today_local()
	if mode == "yesterday":
		return [yesterday(base)]
	if mode == "date":
		if not value:
			raise ValueError("date mode requires a YYYY-MM-DD value")
		return [parse_date(value)]
	if mode == "month":
		if value:
			year, month = parse_month(value)
		else:
			year, month = base.year, base.month
		return month_days(year, month)
	raise ValueError(f"Unsupported date mode: {mode}")


#============================================
def ordinal_suffix(day: int) -> str:
	if 11 <= (day % 100) <= 13:
		return "th"
	return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


#============================================
def human_date(value: date) -> str:
	"""
	Format a date for report titles, e.g. 'Friday, April 25th, 2025'.
	"""
	day_text = f"{value.day}{ordinal_suffix(value.day)}"
	return f"{value.strftime('%A')}, {value.strftime('%B')} {day_text}, {value.year}"
