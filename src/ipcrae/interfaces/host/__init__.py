"""Host runtime adapter: event hooks and chat commands."""

from ipcrae.interfaces.host.plugin import IPCRAEPlugin

__all__ = ["IPCRAEPlugin"]
