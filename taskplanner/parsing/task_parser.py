"""Natural-language parser for quick-add task text.

Turns free text such as "Call dentist tomorrow at 2pm urgent #health" into a
ParsedTaskDraft. Each stage recognizes one kind of fragment, removes it from
the working text and hands the rest to the next stage, so stage order matters:

1. priority keywords ("urgent", "someday", "!!")
2. estimated duration ("30min", "1.5 hours")
3. clock time ("at 2pm"), held until a date is resolved
4. relative dates ("tomorrow", "friday", "next week")
5. absolute dates ("12/25", "2025-03-10", "Dec 25, 2025"), only if 4 found nothing
6. hashtags, which become label names
7. title cleanup

It must be deterministic: same (text, now) -> same draft. It never raises;
anything it does not recognize stays in the title.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field

from taskplanner.models.task import Priority

logger = logging.getLogger(__name__)


class ParsedTaskDraft(BaseModel):
    """Structured, not-yet-persisted result of parsing quick-add text."""

    title: str = Field("", description="Text left over once every recognized fragment is removed")
    schedule_date: Optional[datetime] = Field(None, description="When the task is planned to be worked on")
    deadline: Optional[datetime] = Field(None, description="When the task is due")
    priority: Optional[Priority] = Field(None, description="Explicit priority; never 'none'")
    estimated_minutes: Optional[int] = Field(None, ge=0, description="Estimated duration in minutes")
    labels: Optional[List[str]] = Field(None, description="Hashtag names in order of appearance")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


@dataclass(frozen=True)
class ClockTime:
    hour: int
    minute: int


@dataclass(frozen=True)
class ResolvedDate:
    when: datetime
    is_deadline: bool


def _keyword_pattern(keyword: str) -> re.Pattern:
    """Whole-word, case-insensitive pattern for a keyword or phrase.

    '#' and '-' count as part of a word, so "#urgent-care" or "low-carb"
    never yield "urgent" or "low".
    """
    body = r"\s+".join(re.escape(part) for part in keyword.split())
    if keyword[0].isalnum():
        return re.compile(rf"(?<![\w#-]){body}(?![\w-])", re.I)
    # Punctuation keywords ("!!") must not be carved out of a longer run.
    return re.compile(rf"(?<![\w#!-]){body}(?![\w!-])", re.I)


# Group order high -> medium -> low, then declaration order within a group.
_PRIORITY_KEYWORDS: list[tuple[Priority, list[str]]] = [
    (Priority.HIGH, ["urgent", "important", "critical", "asap", "!!!", "high priority"]),
    (Priority.MEDIUM, ["medium", "normal", "!!", "moderate"]),
    (Priority.LOW, ["low", "minor", "!", "someday"]),
]

_PRIORITY_PATTERNS: list[tuple[Priority, list[re.Pattern]]] = [
    (priority, [_keyword_pattern(k) for k in keywords]) for priority, keywords in _PRIORITY_KEYWORDS
]

_DURATION_RE = re.compile(
    r"(?<![\w.#-])(?P<value>\d{1,6}(?:\.\d+)?)\s*(?P<unit>minutes?|mins?|hours?|hrs?|h)\b", re.I
)

# "at 2pm", "at 14:30", "at 930am". Refuses to eat the front of a date ("at 2025-03-10").
_CLOCK_TIME_RE = re.compile(
    r"(?<![\w#-])at\s+(?P<h>\d{1,2})(?::?(?P<m>\d{2}))?\s*(?P<ampm>am|pm)?\b(?![/\-]\d)", re.I
)

_DEADLINE_CUE_RE = re.compile(r"(?<![\w#-])(?:by|due|deadline|before)\s*$", re.I)
_CONNECTOR_RE = re.compile(r"(?<![\w#-])(?:by|due|deadline|before|on|at)(?![\w-])", re.I)

_SLASH_DATE_RE = re.compile(r"(?<![\w#-])(?P<month>\d{1,2})/(?P<day>\d{1,2})(?:/(?P<year>\d{4}|\d{2}))?\b")
_ISO_DATE_RE = re.compile(r"(?<![\w#-])(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})\b")
_MONTH_NAME_DATE_RE = re.compile(
    r"(?<![\w#-])(?P<month>jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?"
    r"\s+(?P<day>\d{1,2})(?:,?\s+(?P<year>\d{4}))?\b",
    re.I,
)
_MONTH_ABBREVIATIONS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]

_LABEL_RE = re.compile(r"#(\w+(?:-\w+)*)")
_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_SEPARATOR_RE = re.compile(r"[,;]\s*$")


def _remove_spans(text: str, spans: List[Tuple[int, int]]) -> str:
    out = []
    cursor = 0
    for start, end in spans:
        out.append(text[cursor:start])
        cursor = end
    out.append(text[cursor:])
    return "".join(out).strip()


def _strip_connectors(text: str) -> str:
    return _CONNECTOR_RE.sub("", text).strip()


def _is_deadline_cue(preceding: str) -> bool:
    return bool(_DEADLINE_CUE_RE.search(preceding.strip()))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _next_weekday(now: datetime, weekday: int) -> datetime:
    """Next occurrence of weekday (Monday=0) strictly after today."""
    days_ahead = (weekday - now.weekday()) % 7 or 7
    return now + timedelta(days=days_ahead)


def _weekday_resolver(weekday: int) -> Callable[[datetime], datetime]:
    return lambda now: _next_weekday(now, weekday)


_RELATIVE_DATES: list[tuple[re.Pattern, Callable[[datetime], datetime]]] = [
    (_keyword_pattern("today"), lambda now: now),
    (_keyword_pattern("tomorrow"), lambda now: now + timedelta(days=1)),
    (_keyword_pattern("next week"), lambda now: now + timedelta(weeks=1)),
    (_keyword_pattern("next month"), lambda now: now + relativedelta(months=1)),
    (_keyword_pattern("monday"), _weekday_resolver(0)),
    (_keyword_pattern("tuesday"), _weekday_resolver(1)),
    (_keyword_pattern("wednesday"), _weekday_resolver(2)),
    (_keyword_pattern("thursday"), _weekday_resolver(3)),
    (_keyword_pattern("friday"), _weekday_resolver(4)),
    (_keyword_pattern("saturday"), _weekday_resolver(5)),
    (_keyword_pattern("sunday"), _weekday_resolver(6)),
]


def _apply_clock_time(moment: datetime, clock: Optional[ClockTime]) -> datetime:
    if clock is None:
        return moment
    return moment.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)


def extract_priority(text: str) -> Tuple[Optional[Priority], str]:
    """First matching keyword wins; every occurrence of that keyword is removed."""
    for priority, patterns in _PRIORITY_PATTERNS:
        for pattern in patterns:
            if pattern.search(text):
                return priority, pattern.sub("", text).strip()
    return None, text


def extract_duration(text: str) -> Tuple[Optional[int], str]:
    """Extract the first duration estimate, normalized to minutes."""
    m = _DURATION_RE.search(text)
    if not m:
        return None, text
    value = float(m.group("value"))
    unit = m.group("unit").lower()
    if unit.startswith("h"):
        minutes = _round_half_up(value * 60)
    else:
        minutes = _round_half_up(value)
    return minutes, _remove_spans(text, [m.span()])


def _to_clock_time(m: re.Match) -> Optional[ClockTime]:
    hour = int(m.group("h"))
    minute = int(m.group("m") or "0")
    ampm = (m.group("ampm") or "").lower()
    if ampm == "pm" and hour != 12:
        hour += 12
    elif ampm == "am" and hour == 12:
        hour = 0
    # No am/pm: the hour is taken literally as a 24-hour value ("at 9" is 09:00).
    if hour > 23 or minute > 59:
        return None
    return ClockTime(hour=hour, minute=minute)


def extract_clock_time(text: str) -> Tuple[Optional[ClockTime], str]:
    """Extract "at H[:MM][am|pm]".

    The first valid occurrence is held; every valid occurrence is removed.
    Impossible times ("at 27") are not clock times and stay in the text.
    """
    held: Optional[ClockTime] = None
    spans: List[Tuple[int, int]] = []
    for m in _CLOCK_TIME_RE.finditer(text):
        clock = _to_clock_time(m)
        if clock is None:
            continue
        if held is None:
            held = clock
        spans.append(m.span())
    if not spans:
        return None, text
    return held, _remove_spans(text, spans)


def extract_relative_date(
    text: str, now: datetime, clock: Optional[ClockTime] = None
) -> Tuple[Optional[ResolvedDate], str]:
    """Resolve the first relative date keyword (in table order) found in the text."""
    for pattern, resolve in _RELATIVE_DATES:
        m = pattern.search(text)
        if not m:
            continue
        when = _apply_clock_time(resolve(now), clock)
        resolved = ResolvedDate(when=when, is_deadline=_is_deadline_cue(text[: m.start()]))
        return resolved, _strip_connectors(pattern.sub("", text))
    return None, text


def _expand_year(raw: Optional[str], now: datetime) -> int:
    if not raw:
        return now.year
    year = int(raw)
    return 2000 + year if len(raw) == 2 else year


def _slash_date(m: re.Match, now: datetime) -> date:
    return date(_expand_year(m.group("year"), now), int(m.group("month")), int(m.group("day")))


def _iso_date(m: re.Match, now: datetime) -> date:
    return date(int(m.group("year")), int(m.group("month")), int(m.group("day")))


def _month_name_date(m: re.Match, now: datetime) -> date:
    month = _MONTH_ABBREVIATIONS.index(m.group("month")[:3].lower()) + 1
    return date(_expand_year(m.group("year"), now), month, int(m.group("day")))


_ABSOLUTE_DATES: list[tuple[re.Pattern, Callable[[re.Match, datetime], date]]] = [
    (_SLASH_DATE_RE, _slash_date),
    (_ISO_DATE_RE, _iso_date),
    (_MONTH_NAME_DATE_RE, _month_name_date),
]


def extract_absolute_date(
    text: str, now: datetime, clock: Optional[ClockTime] = None
) -> Tuple[Optional[ResolvedDate], str]:
    """Resolve MM/DD[/YYYY], YYYY-MM-DD or "Mon D[, YYYY]", in that order.

    A match that is not a real calendar date (13/45, Feb 30) is skipped.
    """
    for pattern, build in _ABSOLUTE_DATES:
        for m in pattern.finditer(text):
            try:
                day = build(m, now)
            except ValueError:
                continue
            when = _apply_clock_time(datetime.combine(day, time(0, 0), tzinfo=now.tzinfo), clock)
            resolved = ResolvedDate(when=when, is_deadline=_is_deadline_cue(text[: m.start()]))
            return resolved, _strip_connectors(_remove_spans(text, [m.span()]))
    return None, text


def extract_labels(text: str) -> Tuple[List[str], str]:
    """Collect every hashtag (without '#') in order of appearance."""
    labels = _LABEL_RE.findall(text)
    if not labels:
        return [], text
    return labels, _LABEL_RE.sub("", text).strip()


def finalize_title(text: str) -> str:
    collapsed = _WHITESPACE_RE.sub(" ", text)
    return _TRAILING_SEPARATOR_RE.sub("", collapsed).strip()


def parse_task_text(text: Optional[str], *, now: Optional[datetime] = None) -> ParsedTaskDraft:
    """Parse quick-add text into a ParsedTaskDraft.

    Relative dates are computed from `now` (default: current local time) in
    whatever timezone `now` carries; nothing is converted to UTC. At most one
    of schedule_date/deadline is set per call.
    """
    now = now or datetime.now()
    remaining = (text or "").strip()

    priority, remaining = extract_priority(remaining)
    estimated_minutes, remaining = extract_duration(remaining)
    clock, remaining = extract_clock_time(remaining)
    resolved, remaining = extract_relative_date(remaining, now, clock)
    if resolved is None:
        resolved, remaining = extract_absolute_date(remaining, now, clock)
    labels, remaining = extract_labels(remaining)

    schedule_date = deadline = None
    if resolved is not None:
        if resolved.is_deadline:
            deadline = resolved.when
        else:
            schedule_date = resolved.when

    draft = ParsedTaskDraft(
        title=finalize_title(remaining),
        schedule_date=schedule_date,
        deadline=deadline,
        priority=priority,
        estimated_minutes=estimated_minutes,
        labels=labels or None,
    )

    logger.debug(
        f"Parsed task text: title={draft.title[:50]!r} priority={draft.priority} "
        f"minutes={draft.estimated_minutes} schedule={draft.schedule_date} "
        f"deadline={draft.deadline} labels={draft.labels}"
    )
    return draft
