"""Natural-language quick-add parsing for taskplanner."""

from taskplanner.parsing.task_parser import ParsedTaskDraft, parse_task_text

__all__ = [
    "ParsedTaskDraft",
    "parse_task_text",
]
