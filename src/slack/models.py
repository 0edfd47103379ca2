"""Slack slash-command payloads and response messages.

Pure data. The request mirrors the form fields Slack posts to a slash
command endpoint; the responses serialize to the JSON Slack expects back.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class SlashCommandRequest(BaseModel):
    """Form payload of a slash-command invocation."""

    token: str
    text: str = ""
    team_id: str = ""
    team_domain: str = ""
    channel_id: str = ""
    channel_name: str = ""
    user_id: str = ""
    user_name: str = ""
    command: str = ""
    response_url: str = ""
    trigger_id: str = ""


class ResponseType(StrEnum):
    """Who sees the reply."""

    IN_CHANNEL = "in_channel"
    EPHEMERAL = "ephemeral"


class Message(BaseModel):
    """Plain text reply."""

    response_type: ResponseType
    text: str
    mrkdwn: bool = False


class AttachmentField(BaseModel):
    title: str
    value: str


class Attachment(BaseModel):
    title: str
    pretext: str = ""
    text: str = ""
    fields: list[AttachmentField] = Field(default_factory=list)
    mrkdwn_in: list[str] = Field(default_factory=list)


class AttachedMessage(BaseModel):
    """Reply made of attachments."""

    response_type: ResponseType
    attachments: list[Attachment] = Field(default_factory=list)


SlackResponse = Message | AttachedMessage
