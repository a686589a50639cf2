from datetime import datetime

try:
	import rich.console
except ModuleNotFoundError as error:
	raise RuntimeError(
		"Missing dependency: rich. Install with: pip install -e ."
	) from error


RICH_CONSOLE = rich.console.Console()


#============================================
def pick_style(message: str) -> str:
	"""
	Choose a console style from keywords in one progress line.
	"""
	lower = message.lower()
	if ("failed" in lower) or ("error" in lower):
		return "bold red"
	if ("rate limit" in lower) or ("skipping" in lower) or ("not found" in lower) or ("no data" in lower):
		return "yellow"
	if ("saved" in lower) or ("wrote " in lower) or ("found" in lower):
		return "green"
	return "cyan"


#============================================
def make_log_step(script_name: str):
	"""
	Build a log_step function that prints '[script HH:MM:SS] message'.
	"""
	def log_step(message: str) -> None:
		now_text = datetime.now().strftime("%H:%M:%S")
		line = f"[{script_name} {now_text}] {message}"
		RICH_CONSOLE.print(line, style=pick_style(message), markup=False, highlight=False)
	return log_step


#============================================
def print_text(text: str) -> None:
	"""
	Print a rendered Markdown artifact verbatim.
	"""
	RICH_CONSOLE.print(text, markup=False, highlight=False)
