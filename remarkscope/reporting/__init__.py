# remarkscope/reporting/__init__.py
from .reporting import (
    assemble_diff_report,
    format_count_csv,
    format_diff_text,
    render_count,
    render_diff,
    write_output,
)

__all__ = [
    "assemble_diff_report",
    "format_count_csv",
    "format_diff_text",
    "render_count",
    "render_diff",
    "write_output",
]
