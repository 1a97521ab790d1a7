"""IPCRAE vault bridge: consistency snapshot, write policy and note sync."""

__version__ = "0.1.0"
