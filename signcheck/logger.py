from functools import lru_cache
from rich.console import Console
from rich.theme import Theme

REPORT_THEME = Theme(
    {
        "pass": "bold green",
        "fail": "bold red",
        "skip": "dim",
        "key": "cyan",
    }
)


@lru_cache(maxsize=1)
def get_console() -> Console:
    """Get or create the shared Console used for progress logs and reports"""
    return Console(theme=REPORT_THEME)


@lru_cache(maxsize=1)
def get_log_console() -> Console:
    """Console for progress logs. Writes to stderr, reports stay on stdout"""
    return Console(theme=REPORT_THEME, stderr=True)
