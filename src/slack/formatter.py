"""Render work log data as Slack messages.

Everything user-facing lives here. Functions take core data and return
``Message`` / ``AttachedMessage`` models; none of them touch storage.
"""

from __future__ import annotations

from glt.slack.models import (
    AttachedMessage,
    Attachment,
    AttachmentField,
    Message,
    ResponseType,
)
from glt.worklog.models import Date, DayRecord, MonthArchive, Participant, Time, TimeDiff
from glt.worklog.summary import MonthSummary

HELP_TEXT = """\
/glt init              # start today's session
/glt add <name> ...    # record who showed up
/glt rm <name> ...     # take someone off today's list
/glt status            # show today's session
/glt commit <note>     # end today's session with a note
/glt reset             # throw today's session away
/glt log               # show this month's sessions
/glt push              # file this month away and start a new one"""


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def format_date(date: Date) -> str:
    return date.isoformat()


def format_time(time: Time) -> str:
    return f"{time.hour}:{time.minute:02d}"


def format_span(span: TimeDiff) -> str:
    if span.total_minutes < 0:
        return f"-{-span.hours}h {-span.minutes}m"
    return f"{span.hours}h {span.minutes}m"


def format_hours(hours: float) -> str:
    return format_span(TimeDiff.from_hours(hours))


def format_session_range(record: DayRecord) -> str:
    """``9:00 ~ 18:30 9h 30m`` for sealed records, ``started 9:00`` otherwise."""
    if record.end_time is None:
        return f"started {format_time(record.start_time)}"
    duration = record.end_time - record.start_time
    return (
        f"{format_time(record.start_time)} ~ {format_time(record.end_time)} "
        f"{format_span(duration)}"
    )


def _participant_lines(participants: tuple[Participant, ...]) -> str:
    return "\n".join(f"{p.name} - {format_time(p.joined_at)}" for p in participants)


def _join_names(names: list[str]) -> str:
    return ", ".join(names)


# ---------------------------------------------------------------------------
# Plain replies
# ---------------------------------------------------------------------------


def session_started(record: DayRecord) -> Message:
    return Message(
        response_type=ResponseType.IN_CHANNEL,
        text=f"Session for {format_date(record.date)} started at {format_time(record.start_time)}!",
    )


def already_open() -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text="A session is already running.\nTo throw it away, use `glt reset`",
        mrkdwn=True,
    )


def no_open_session() -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text="No session is running.\nTo start one, use `glt init`",
        mrkdwn=True,
    )


def invalid_argument() -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text="Missing or invalid arguments.\nFor usage, see `glt help`",
        mrkdwn=True,
    )


def participants_added(added: list[str]) -> Message:
    if not added:
        return Message(
            response_type=ResponseType.EPHEMERAL,
            text="Everyone listed is already on today's session.",
        )
    return Message(
        response_type=ResponseType.IN_CHANNEL,
        text=f"Added {_join_names(added)} to today's session.",
    )


def participants_removed(removed: list[str]) -> Message:
    if not removed:
        return Message(
            response_type=ResponseType.EPHEMERAL,
            text="Nobody listed was on today's session.",
        )
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text=f"Removed {_join_names(removed)} from today's session.",
    )


def discarded() -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text="Today's session was discarded.",
    )


def month_archived(result: MonthArchive) -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text=(
            f"Filed {len(result.moved)} day(s) under {result.year}-{result.month:02d}. "
            "That's the month done, thanks everyone!"
        ),
    )


def nothing_to_archive() -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text="No finished sessions to file away yet.",
    )


def nothing_to_summarize() -> Message:
    return Message(
        response_type=ResponseType.EPHEMERAL,
        text="No finished sessions this month yet.\nEnd a session with `glt commit <note>`",
        mrkdwn=True,
    )


def help_text() -> Message:
    return Message(response_type=ResponseType.EPHEMERAL, text=HELP_TEXT)


# ---------------------------------------------------------------------------
# Attachment replies
# ---------------------------------------------------------------------------


def status(record: DayRecord) -> AttachedMessage:
    attachment = Attachment(
        title=format_date(record.date),
        pretext="Today's session",
        fields=[
            AttachmentField(title="Started", value=format_time(record.start_time)),
            AttachmentField(title="Participants", value=_participant_lines(record.participants)),
        ],
    )
    return AttachedMessage(response_type=ResponseType.EPHEMERAL, attachments=[attachment])


def committed(record: DayRecord) -> AttachedMessage:
    attachment = Attachment(
        title=format_date(record.date),
        pretext="That's a wrap for today. Thanks for the hard work!",
        fields=[
            AttachmentField(title="Hours", value=format_session_range(record)),
            AttachmentField(title="Note", value=record.note or ""),
            AttachmentField(title="Participants", value=_participant_lines(record.participants)),
        ],
    )
    return AttachedMessage(response_type=ResponseType.IN_CHANNEL, attachments=[attachment])


def _day_field(record: DayRecord) -> AttachmentField:
    lines = [format_session_range(record)]
    if record.note:
        lines.append(record.note)
    if record.participants:
        lines.append(_join_names(record.participant_names))
    return AttachmentField(title=f"Day {record.date.day}", value="\n".join(lines))


def month_log(summary: MonthSummary) -> AttachedMessage:
    """Per-day fields followed by a totals field when anyone attended."""
    overview = f"{summary.days} day(s), {format_hours(summary.total_hours)} in total"
    attachment = Attachment(
        title=f"{summary.year}-{summary.month:02d}",
        pretext="This month's sessions",
        text=overview,
        fields=[_day_field(record) for record in summary.records],
        mrkdwn_in=["fields"],
    )
    if summary.participants:
        lines = [f"Of {overview}:"]
        for name, total in summary.participants.items():
            lines.append(f"{name} - {total.days} day(s), {format_hours(total.hours)}")
        attachment.fields.append(AttachmentField(title="Totals", value="\n".join(lines)))
    return AttachedMessage(response_type=ResponseType.IN_CHANNEL, attachments=[attachment])
