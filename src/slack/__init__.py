"""Slack slash-command adapter for the work log."""

from glt.slack.commands import Command, ParsedCommand, parse_command
from glt.slack.dispatcher import CommandDispatcher
from glt.slack.models import (
    AttachedMessage,
    Attachment,
    AttachmentField,
    Message,
    ResponseType,
    SlackResponse,
    SlashCommandRequest,
)

__all__ = [
    "AttachedMessage",
    "Attachment",
    "AttachmentField",
    "Command",
    "CommandDispatcher",
    "Message",
    "ParsedCommand",
    "ResponseType",
    "SlackResponse",
    "SlashCommandRequest",
    "parse_command",
]
