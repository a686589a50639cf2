from digestlib import activity_model
from digestlib import date_enumerator


TOP_ACTIVITY_LIMIT = 15
TOP_DOCUMENTS_PER_HOUR = 10


#============================================
def render_summary_section(summary: activity_model.DailyActivitySummary) -> list[str]:
	total_text = activity_model.format_duration(summary.total_seconds)
	pulse = activity_model.clamp_score(summary.productivity_pulse)
	return [
		"## Summary",
		f"- Total time tracked: {total_text} ({summary.total_hours:.2f} hours)",
		f"- Productivity pulse: {pulse}/100",
		"",
	]


#============================================
def render_distribution_section(summary: activity_model.DailyActivitySummary) -> list[str]:
	lines = ["## Time Distribution"]
	for _, key, label, _ in activity_model.PRODUCTIVITY_LEVELS:
		duration = activity_model.format_duration(summary.seconds_for(key))
		lines.append(f"- {label}: {duration} ({summary.percentage_for(key):.1f}%)")
	lines.append("")
	return lines


#============================================
def render_activities_section(activities: list) -> list[str]:
	if not activities:
		return []
	lines = ["## Top Activities"]
	for activity in activities[:TOP_ACTIVITY_LIMIT]:
		duration = activity_model.format_duration(activity.time_spent_seconds)
		label = activity_model.productivity_label(activity.productivity)
		lines.append(f"- {activity.activity} ({duration}) - {activity.category} ({label})")
	lines.append("")
	return lines


#============================================
def render_hourly_section(hourly_documents: dict) -> list[str]:
	"""
	Render the per-hour window title breakdown.

	An hour without entries still gets a heading plus a no-data line.
	"""
	if not hourly_documents:
		return []
	lines = ["## Hourly Breakdown with Tab Titles", ""]
	for hour in activity_model.sorted_hours(hourly_documents):
		lines.append(f"### {hour}")
		lines.append("")
		documents = hourly_documents.get(hour) or []
		if not documents:
			lines.append("No detailed data available for this hour.")
		for document in documents[:TOP_DOCUMENTS_PER_HOUR]:
			duration = activity_model.format_duration(document.time_spent_seconds)
			label = activity_model.productivity_label(document.productivity)
			lines.append(f"- **{document.title}** ({duration}) - {document.application} ({label})")
		lines.append("")
	return lines


#============================================
def render_daily_report(
	summary: activity_model.DailyActivitySummary,
	activities: list,
	hourly_documents: dict,
) -> str:
	"""
	Render one day of time tracking as a fixed-section Markdown report.
	"""
	title_date = date_enumerator.human_date(date_enumerator.parse_date(summary.date))
	lines = [f"# RescueTime Daily Report for {title_date}", ""]
	lines.extend(render_summary_section(summary))
	lines.extend(render_distribution_section(summary))
	lines.extend(render_activities_section(activities))
	lines.extend(render_hourly_section(hourly_documents))
	return "\n".join(lines)


#============================================
def render_no_data_report(date_text: str) -> str:
	return f"No data found for {date_text}"
