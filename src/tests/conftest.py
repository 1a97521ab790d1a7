"""Shared test fixtures and configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ipcrae.core.cache import TextCache
from ipcrae.core.config import IPCRAEConfig
from ipcrae.core.snapshot import SnapshotReader


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHost:
    """In-memory host runtime capturing registered commands and hooks."""

    def __init__(self, plugin_config: dict):
        self.plugin_config = plugin_config
        self.logger = logging.getLogger("tests.host")
        self.commands = {}
        self.events = {}

    def resolve_path(self, value: str) -> str:
        return value

    def on(self, event, handler) -> None:
        self.events[event] = handler

    def register_command(self, command) -> None:
        self.commands[command.name] = command


@pytest.fixture
def clock():
    """Controllable clock for cache tests."""
    return FakeClock()


@pytest.fixture
def reader(clock):
    """Snapshot reader with an isolated cache on the fake clock."""
    return SnapshotReader(TextCache(clock=clock))


@pytest.fixture
def make_vault(tmp_path):
    """Factory building a fixture vault under tmp_path."""

    def _make_vault(
        *,
        with_context: bool = True,
        with_instructions: bool = True,
        with_phase_index: bool = True,
        with_state: bool = True,
        context_text: str = "Domaine actif: devops\nProjet actif: openclawIPCRAE\n",
        state: dict | str | None = None,
    ) -> Path:
        root = tmp_path / "vault"
        (root / ".ipcrae" / "prompts").mkdir(parents=True, exist_ok=True)
        (root / "memory").mkdir(exist_ok=True)
        (root / "Phases").mkdir(exist_ok=True)
        (root / "Projets" / "openclawIPCRAE").mkdir(parents=True, exist_ok=True)

        if with_context:
            (root / ".ipcrae" / "context.md").write_text(context_text)
        if with_state:
            payload = state if state is not None else {
                "domain": "strategy",
                "projectSlug": "state-project",
            }
            (root / "Projets" / "state-project").mkdir(parents=True, exist_ok=True)
            (root / ".ipcrae" / "state.json").write_text(
                payload if isinstance(payload, str) else json.dumps(payload)
            )
            (root / "Projets" / "state-project" / "tracking.md").write_text(
                "Next action: from-state"
            )
        if with_instructions:
            (root / ".ipcrae" / "instructions.md").write_text(
                "Toujours respecter la methode IPCRAE."
            )
        if with_phase_index:
            (root / "Phases" / "index.md").write_text("Phase active: Execution")

        (root / ".ipcrae" / "prompts" / "core_ai_pretreatment_gate.md").write_text(
            "Prioriser la coherence du CDE."
        )
        (root / "memory" / "devops.md").write_text("Memoire stable")
        (root / "Projets" / "openclawIPCRAE" / "tracking.md").write_text(
            "Next action: valider"
        )
        return root

    return _make_vault


@pytest.fixture
def vault_root(make_vault):
    """A complete, consistent vault."""
    return make_vault()


@pytest.fixture
def make_config():
    """Factory for configs pointing at a vault root."""

    def _make_config(root: Path, **overrides) -> IPCRAEConfig:
        values = {"ipcrae_root": root, "context_cache_ttl_ms": 1_000}
        values.update(overrides)
        return IPCRAEConfig(**values)

    return _make_config


@pytest.fixture
def make_host():
    """Factory for fake host runtimes."""

    def _make_host(root: Path, **plugin_config) -> FakeHost:
        config = {
            "ipcraeRoot": str(root),
            "contextMode": "compact",
            "autoJournal": True,
            "autoCapture": True,
        }
        config.update(plugin_config)
        return FakeHost(config)

    return _make_host
