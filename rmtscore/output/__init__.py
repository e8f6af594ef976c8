"""Output generation: terminal reports and score history files."""

from rmtscore.output.report import (
    format_score_detail,
    format_score_line,
    load_latest_score_history,
    save_score_history,
)

__all__ = [
    "format_score_detail",
    "format_score_line",
    "load_latest_score_history",
    "save_score_history",
]
