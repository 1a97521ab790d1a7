"""IPCRAE plugin: registers event hooks and chat commands with a host runtime.

The host owns scheduling. It supplies its raw plugin config, a path
resolver, a logger, an event subscription hook and a command registry;
this module only wires the vault operations into them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol

from ipcrae.core.config import IPCRAEConfig, resolve_config
from ipcrae.core.context import build_context
from ipcrae.core.snapshot import SnapshotReader
from ipcrae.core.types import CommandContext, CommandResult, JournalEntry
from ipcrae.interfaces.host.commands import CommandHandlers
from ipcrae.vault.daily import write_journal_entry

BEFORE_PROMPT_BUILD = "before_prompt_build"
SESSION_END = "session_end"

CommandHandler = Callable[[CommandContext], Awaitable[CommandResult]]
EventHandler = Callable[[Any, Any], Awaitable[Any]]


@dataclass(frozen=True)
class Command:
    """A chat command registered with the host."""

    name: str
    description: str
    accepts_args: bool
    handler: CommandHandler


@dataclass
class SessionEndEvent:
    session_id: str
    message_count: int
    duration_ms: int | None = None


@dataclass
class HookContext:
    agent_id: str | None = None


class HostApi(Protocol):
    """What the host runtime provides to a plugin."""

    plugin_config: Any
    logger: logging.Logger

    def resolve_path(self, value: str) -> str:
        pass

    def on(self, event: str, handler: EventHandler) -> None:
        pass

    def register_command(self, command: Command) -> None:
        pass


class IPCRAEPlugin:
    """Vault context injection, session journaling and capture commands."""

    id = "ipcrae"
    name = "IPCRAE"
    description = "IPCRAE vault context injection, journaling, and capture commands"

    def __init__(self, reader: SnapshotReader | None = None):
        """
        Initialize the plugin.

        Args:
            reader: Snapshot reader; its cache is shared by every hook and command
        """
        self.reader = reader or SnapshotReader()
        self.config: IPCRAEConfig | None = None
        self.logger = logging.getLogger(__name__)

    def register(self, api: HostApi) -> None:
        """Resolve config and register hooks and commands with the host."""
        config = resolve_config(api.plugin_config, api.resolve_path)
        self.config = config
        self.logger = api.logger
        handlers = CommandHandlers(config, self.reader)

        self.logger.info(
            f"[ipcrae] enabled root={config.ipcrae_root} mode={config.context_mode} "
            f"autoJournal={config.auto_journal} autoCapture={config.auto_capture}"
        )

        api.on(BEFORE_PROMPT_BUILD, self.before_prompt_build)
        api.on(SESSION_END, self.session_end)

        for command in (
            Command("capture", "Capture text into IPCRAE Inbox/idees.", True, handlers.capture),
            Command(
                "capture-local",
                "Save a volatile local note (allowed in degraded mode).",
                True,
                handlers.capture_local,
            ),
            Command(
                "promote-note",
                "Promote a local note into stable Knowledge.",
                True,
                handlers.promote_note,
            ),
            Command(
                "ipcrae-sync",
                "Sync project index/tracking/memory with an optional next action.",
                True,
                handlers.sync,
            ),
            Command(
                "ipcrae-status",
                "Show IPCRAE vault integration status (phase/project/context).",
                False,
                handlers.status,
            ),
        ):
            api.register_command(command)

    def _require_config(self) -> IPCRAEConfig:
        if self.config is None:
            raise RuntimeError("IPCRAEPlugin.register() has not been called")
        return self.config

    async def before_prompt_build(self, event: Any = None, ctx: Any = None) -> dict | None:
        """Prepend vault context to the prompt; failures only log."""
        config = self._require_config()
        try:
            context = await build_context(config, self.reader)
        except Exception as e:
            self.logger.warning(f"[ipcrae] failed to build context: {e}")
            return None
        if not context:
            return None
        return {"prepend_context": context}

    async def session_end(self, event: SessionEndEvent, ctx: HookContext | None = None) -> None:
        """Journal the finished session when autoJournal is on."""
        config = self._require_config()
        if not config.auto_journal:
            return
        try:
            path = await write_journal_entry(
                config.ipcrae_root,
                datetime.now(timezone.utc),
                JournalEntry(
                    session_id=event.session_id,
                    message_count=event.message_count,
                    duration_ms=event.duration_ms,
                    agent_id=ctx.agent_id if ctx else None,
                ),
            )
        except OSError as e:
            self.logger.warning(f"[ipcrae] failed session journal write: {e}")
            return
        self.logger.info(f"[ipcrae] session journal appended: {path}")
