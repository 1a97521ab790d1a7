"""Tests for the vault note writers."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from ipcrae.core.errors import (
    EmptyNoteError,
    InvalidDomainError,
    InvalidSourcesError,
    InvalidTagsError,
    VaultValidationError,
)
from ipcrae.core.types import CaptureEntry, KnowledgeEntry, LocalNoteEntry
from ipcrae.vault.frontmatter import parse_frontmatter
from ipcrae.vault.notes import (
    capture_inbox,
    normalize_tag,
    slugify,
    write_knowledge_note,
    write_local_note,
)

NOW = datetime(2026, 3, 14, 9, 26, 53, 589000, tzinfo=timezone.utc)
SOURCE = "docs/conception/03_IPCRAE_BRIDGE.md"


class TestSlugs:
    """Tests for slug and tag normalization."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Hello World", "hello-world"),
            ("  Ça va? Très bien!  ", "a-va-tr-s-bien"),
            ("!!!", "capture"),
            ("", "capture"),
        ],
    )
    def test_slugify(self, text, expected):
        """slugify lowercases and collapses invalid runs."""
        assert slugify(text) == expected

    def test_slugify_caps_length(self):
        """Slugs are at most 60 characters."""
        assert len(slugify("word " * 40)) == 60

    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("DevOps", "devops"),
            ("  data science ", "data-science"),
            ("a--b", "a-b"),
            ("snake_case", "snake_case"),
            ("!!!", ""),
            ("   ", ""),
        ],
    )
    def test_normalize_tag(self, tag, expected):
        """normalize_tag keeps [a-z0-9_-] with single hyphens."""
        assert normalize_tag(tag) == expected


class TestCaptureInbox:
    """Tests for capture_inbox()."""

    @pytest.mark.asyncio
    async def test_creates_file_named_from_timestamp_and_words(self, tmp_path):
        """File name is a timestamp prefix and a slug of the first words."""
        path = await capture_inbox(
            tmp_path,
            CaptureEntry(text="  Idee: one two three four five six seven eight nine  "),
            now=NOW,
        )

        assert Path(path).parent == tmp_path / "Inbox" / "idees"
        assert Path(path).name == (
            "2026-03-14T09-26-53-idee-one-two-three-four-five-six-seven.md"
        )

    @pytest.mark.asyncio
    async def test_frontmatter_and_body(self, tmp_path):
        """Frontmatter carries type, creation time and optional fields."""
        path = await capture_inbox(
            tmp_path,
            CaptureEntry(text="Penser a X", channel="cli", sender_id="u1", project_slug="demo"),
            now=NOW,
        )

        frontmatter, body = parse_frontmatter(Path(path).read_text())
        assert frontmatter["type"] == "inbox"
        assert frontmatter["channel"] == "cli"
        assert frontmatter["sender"] == "u1"
        assert frontmatter["project"] == "demo"
        assert frontmatter["created"] == "2026-03-14T09:26:53.589Z"
        assert "# Capture 2026-03-14" in body
        assert body.rstrip().endswith("Penser a X")

    @pytest.mark.asyncio
    async def test_optional_fields_omitted(self, tmp_path):
        """Absent channel/sender/project produce no lines."""
        path = await capture_inbox(tmp_path, CaptureEntry(text="Seul"), now=NOW)

        content = Path(path).read_text()
        assert "channel:" not in content
        assert "sender:" not in content
        assert "project:" not in content

    @pytest.mark.asyncio
    async def test_yaml_special_characters_survive(self, tmp_path):
        """Channel and sender values that need quoting read back intact."""
        path = await capture_inbox(
            tmp_path,
            CaptureEntry(text="hello", channel="#general", sender_id="@alice"),
            now=NOW,
        )

        frontmatter, body = parse_frontmatter(Path(path).read_text())
        assert frontmatter is not None
        assert frontmatter["channel"] == "#general"
        assert frontmatter["sender"] == "@alice"
        assert body.rstrip().endswith("hello")

    @pytest.mark.asyncio
    async def test_rejects_empty_text(self, tmp_path):
        """Blank captures raise before touching the vault."""
        with pytest.raises(EmptyNoteError):
            await capture_inbox(tmp_path, CaptureEntry(text="   "))

        assert not (tmp_path / "Inbox").exists()


class TestLocalNote:
    """Tests for write_local_note()."""

    @pytest.mark.asyncio
    async def test_writes_under_local_notes(self, tmp_path):
        """Local notes go to .ipcrae-project/local-notes/<date>/openclaw.md."""
        path = await write_local_note(
            tmp_path,
            LocalNoteEntry(
                text="Hypothese temporaire sur le routing",
                project_slug="openclawIPCRAE",
                channel="cli",
            ),
            now=NOW,
        )

        assert Path(path) == (
            tmp_path / ".ipcrae-project" / "local-notes" / "2026-03-14" / "openclaw.md"
        )
        content = Path(path).read_text()
        assert "## Note 09:26:53" in content
        assert "- channel: cli" in content
        assert "- project: openclawIPCRAE" in content
        assert "Hypothese temporaire" in content

    @pytest.mark.asyncio
    async def test_blocks_accumulate_in_daily_file(self, tmp_path):
        """Two notes on the same day share one file."""
        first = await write_local_note(tmp_path, LocalNoteEntry(text="Premier"), now=NOW)
        second = await write_local_note(
            tmp_path,
            LocalNoteEntry(text="Second"),
            now=NOW.replace(hour=10),
        )

        assert first == second
        content = Path(first).read_text()
        assert content.count("## Note ") == 2
        assert content.index("Premier") < content.index("## Note 10:26:53")
        assert "Premier\n\n## Note" in content

    @pytest.mark.asyncio
    async def test_rejects_empty_text(self, tmp_path):
        """Blank local notes are refused."""
        with pytest.raises(EmptyNoteError):
            await write_local_note(tmp_path, LocalNoteEntry(text="\n"))


class TestKnowledgeNote:
    """Tests for write_knowledge_note()."""

    @pytest.mark.asyncio
    async def test_writes_yaml_frontmatter(self, tmp_path):
        """Knowledge notes carry the expected frontmatter."""
        path = await write_knowledge_note(
            tmp_path,
            KnowledgeEntry(
                text="Toujours separer les notes volatiles de la connaissance stable.",
                title="Separation local notes et knowledge",
                project_slug="openclawIPCRAE",
                domain="DevOps",
                tags=["devops", "IPCRAE", "devops"],
                sources=[SOURCE],
            ),
            now=NOW,
        )

        assert Path(path) == (
            tmp_path / "Knowledge" / "2026-03-14-separation-local-notes-et-knowledge.md"
        )
        content = Path(path).read_text()
        assert "type: knowledge" in content
        assert "tags: [devops, ipcrae]" in content
        assert "project: openclawIPCRAE" in content
        assert "domain: devops" in content
        assert "status: stable" in content
        assert f"  - path: {SOURCE}" in content
        assert "# Separation local notes et knowledge" in content

        frontmatter, body = parse_frontmatter(content)
        assert frontmatter["sources"] == [{"path": SOURCE}]
        assert frontmatter["tags"] == ["devops", "ipcrae"]
        assert body.strip().endswith("connaissance stable.")

    @pytest.mark.asyncio
    async def test_frontmatter_is_valid_yaml(self, tmp_path):
        """The frontmatter block parses with a YAML loader."""
        path = await write_knowledge_note(
            tmp_path,
            KnowledgeEntry(text="Body", domain="qa", sources=[SOURCE]),
            now=NOW,
        )

        block = Path(path).read_text().split("---")[1]
        data = yaml.safe_load(block)
        assert data["domain"] == "qa"
        assert data["tags"] == ["qa"]

    @pytest.mark.asyncio
    async def test_source_path_with_yaml_syntax(self, tmp_path):
        """Source paths containing ': ' and ' #' stay parseable."""
        source = "notes/meeting: q3 #1.md"
        path = await write_knowledge_note(
            tmp_path,
            KnowledgeEntry(text="Compte rendu", domain="qa", sources=[source]),
            now=NOW,
        )

        frontmatter, _ = parse_frontmatter(Path(path).read_text())
        assert frontmatter is not None
        assert frontmatter["sources"] == [{"path": source}]
        assert frontmatter["domain"] == "qa"

    @pytest.mark.asyncio
    async def test_title_defaults_to_first_words(self, tmp_path):
        """Without a title the first eight words are used."""
        path = await write_knowledge_note(
            tmp_path,
            KnowledgeEntry(
                text="un deux trois quatre cinq six sept huit neuf",
                domain="qa",
                sources=[SOURCE],
            ),
            now=NOW,
        )

        assert Path(path).name == "2026-03-14-un-deux-trois-quatre-cinq-six-sept-huit.md"

    @pytest.mark.asyncio
    async def test_non_strict_allows_missing_sources(self, tmp_path):
        """strict=False accepts an empty source list."""
        path = await write_knowledge_note(
            tmp_path,
            KnowledgeEntry(text="Sans source", domain="qa", strict=False),
            now=NOW,
        )

        assert Path(path).exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides,error,message",
        [
            ({"domain": "   "}, InvalidDomainError, "invalid knowledge domain"),
            ({"domain": None}, InvalidDomainError, "invalid knowledge domain"),
            ({"tags": ["!!!"]}, InvalidTagsError, "invalid knowledge tags"),
            ({"tags": []}, InvalidTagsError, "invalid knowledge tags"),
            ({"sources": None}, InvalidSourcesError, "required in strict mode"),
            ({"sources": ["  "]}, InvalidSourcesError, "required in strict mode"),
        ],
    )
    async def test_validation_failures(self, tmp_path, overrides, error, message):
        """Each validation fails on its own, before any write."""
        values = {
            "text": "Note stable",
            "project_slug": "openclawIPCRAE",
            "domain": "devops",
            "tags": ["devops"],
            "sources": [SOURCE],
        }
        values.update(overrides)

        with pytest.raises(error, match=f"(?i){message}"):
            await write_knowledge_note(tmp_path, KnowledgeEntry(**values))

        assert not (tmp_path / "Knowledge").exists()

    @pytest.mark.asyncio
    async def test_validation_errors_are_value_errors(self, tmp_path):
        """Validation failures share a catchable base class."""
        with pytest.raises(VaultValidationError):
            await write_knowledge_note(tmp_path, KnowledgeEntry(text="x", domain=""))
        with pytest.raises(ValueError):
            await write_knowledge_note(tmp_path, KnowledgeEntry(text="x", domain=""))
