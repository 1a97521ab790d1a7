"""Vault module: file layout and writers for the IPCRAE markdown vault.

The vault is a plain directory of markdown files, editable by hand. This
package writes into it:
- Volatile notes (inbox captures, local notes, session journal)
- Stable knowledge notes, validated before writing
- Managed blocks inside project tracking/memory files
"""

from ipcrae.vault.layout import (
    get_context_path,
    get_inbox_path,
    get_instructions_path,
    get_knowledge_path,
    get_phase_index_path,
)

__all__ = [
    "get_context_path",
    "get_inbox_path",
    "get_instructions_path",
    "get_knowledge_path",
    "get_phase_index_path",
]
