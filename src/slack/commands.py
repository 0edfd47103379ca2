"""Slash-command text parsing.

The first word of the command text picks the command; the rest is its
argument. Each command parses into its own model, so the dispatcher
can look handlers up by type and anything unrecognised lands on
``UnknownCommand`` instead of being guessed at.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class Command(StrEnum):
    """Command keywords, as typed after the slash command."""

    INIT = "init"
    ADD = "add"
    REMOVE = "rm"
    STATUS = "status"
    COMMIT = "commit"
    RESET = "reset"
    LOG = "log"
    PUSH = "push"
    HELP = "help"


class InitCommand(BaseModel):
    kind: Literal[Command.INIT] = Command.INIT


class AddCommand(BaseModel):
    kind: Literal[Command.ADD] = Command.ADD
    names: list[str] = Field(default_factory=list)


class RemoveCommand(BaseModel):
    kind: Literal[Command.REMOVE] = Command.REMOVE
    names: list[str] = Field(default_factory=list)


class StatusCommand(BaseModel):
    kind: Literal[Command.STATUS] = Command.STATUS


class CommitCommand(BaseModel):
    kind: Literal[Command.COMMIT] = Command.COMMIT
    note: str = ""


class ResetCommand(BaseModel):
    kind: Literal[Command.RESET] = Command.RESET


class LogCommand(BaseModel):
    kind: Literal[Command.LOG] = Command.LOG


class PushCommand(BaseModel):
    kind: Literal[Command.PUSH] = Command.PUSH


class HelpCommand(BaseModel):
    kind: Literal[Command.HELP] = Command.HELP


class UnknownCommand(BaseModel):
    kind: Literal["unknown"] = "unknown"
    word: str = ""


ParsedCommand = (
    InitCommand
    | AddCommand
    | RemoveCommand
    | StatusCommand
    | CommitCommand
    | ResetCommand
    | LogCommand
    | PushCommand
    | HelpCommand
    | UnknownCommand
)


def parse_command(text: str) -> ParsedCommand:
    """Parse slash-command text such as ``"add alice bob"``.

    Keywords are matched case-insensitively and must be the whole first
    word. Empty text asks for help.
    """
    parts = text.strip().split(maxsplit=1)
    if not parts:
        return HelpCommand()
    word = parts[0].lower()
    rest = parts[1].strip() if len(parts) > 1 else ""

    try:
        command = Command(word)
    except ValueError:
        return UnknownCommand(word=parts[0])

    if command is Command.INIT:
        return InitCommand()
    if command is Command.ADD:
        return AddCommand(names=rest.split())
    if command is Command.REMOVE:
        return RemoveCommand(names=rest.split())
    if command is Command.STATUS:
        return StatusCommand()
    if command is Command.COMMIT:
        return CommitCommand(note=rest)
    if command is Command.RESET:
        return ResetCommand()
    if command is Command.LOG:
        return LogCommand()
    if command is Command.PUSH:
        return PushCommand()
    return HelpCommand()
