"""Integration tests for user-initiated renames."""

import pytest

from superscript.models.config import Config
from superscript.models.document import Addressed, Unaddressed
from superscript.services.session import EditorSession


def names(directory):
    return sorted(path.name for path in directory.iterdir())


@pytest.fixture
def quiet_session(notes_dir, fs, clock):
    """Session whose autosave timer never fires during a test."""
    config = Config(autosave={"debounce_ms": 60000}, collisions={"case_policy": "sensitive"})
    return EditorSession(config, notes_dir.as_posix(), filesystem=fs, clock=clock)


class TestExplicitNames:
    """Test names typed by the user."""

    @pytest.mark.asyncio
    async def test_rename_moves_file(self, session, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("Shopping list")

        assert result.status == "renamed"
        assert result.committed
        assert not result.keep_editing
        assert names(notes_dir) == ["Shopping list.md"]
        assert session.document.path == f"{notes_dir.as_posix()}/Shopping list.md"
        assert f"{notes_dir.as_posix()}/Shopping list.md" in session.files

    @pytest.mark.asyncio
    async def test_existing_name_is_blocked(self, session, notes_dir, make_note):
        """Test that a typed name never replaces another document."""
        make_note("a.md", "A")
        make_note("b.md", "B")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("b")

        assert result.status == "blocked"
        assert result.keep_editing
        assert "already exists" in result.message
        assert (notes_dir / "a.md").read_text() == "A"
        assert (notes_dir / "b.md").read_text() == "B"
        assert session.document.path == f"{notes_dir.as_posix()}/a.md"

    @pytest.mark.asyncio
    async def test_blocked_rename_writes_nothing(self, quiet_session, fs, notes_dir, make_note):
        """Test that pending edits stay pending when the typed name is taken."""
        make_note("a.md", "A")
        make_note("b.md", "B")
        await quiet_session.open(f"{notes_dir.as_posix()}/a.md")
        quiet_session.edit("A edited")

        result = await quiet_session.rename("b")

        assert result.status == "blocked"
        assert fs.writes == []
        assert fs.moves == []
        assert (notes_dir / "a.md").read_text() == "A"
        assert quiet_session.saver.pending.content == "A edited"

    @pytest.mark.asyncio
    async def test_case_variant_blocked_when_case_insensitive(self, notes_dir, make_note, fs):
        config = Config(autosave={"debounce_ms": 20}, collisions={"case_policy": "insensitive"})
        session = EditorSession(config, notes_dir.as_posix(), filesystem=fs)
        make_note("Plan.md", "P")
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("plan")

        assert result.status == "blocked"

    @pytest.mark.asyncio
    async def test_typed_extension_ignored(self, session, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("c.md")

        assert result.status == "renamed"
        assert names(notes_dir) == ["c.md"]

    @pytest.mark.asyncio
    async def test_separators_removed(self, session, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("2024/Q1\\plan")

        assert result.status == "renamed"
        assert names(notes_dir) == ["2024Q1plan.md"]

    @pytest.mark.asyncio
    async def test_canvas_keeps_extension(self, session, notes_dir, make_note):
        make_note("sketch.excalidraw", "{}")
        await session.open(f"{notes_dir.as_posix()}/sketch.excalidraw")

        result = await session.rename("diagram")

        assert result.status == "renamed"
        assert names(notes_dir) == ["diagram.excalidraw"]

    @pytest.mark.asyncio
    async def test_same_name_unchanged(self, session, fs, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("  a  ")

        assert result.status == "unchanged"
        assert not result.keep_editing
        assert fs.moves == []

    @pytest.mark.parametrize("value", ["", "   ", "//", ".md"])
    @pytest.mark.asyncio
    async def test_empty_input_is_noop(self, session, fs, notes_dir, make_note, value):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename(value)

        assert result.status == "noop"
        assert not result.keep_editing
        assert fs.moves == []

    @pytest.mark.asyncio
    async def test_pending_edits_flushed_before_move(self, session, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")
        session.edit("A edited")

        await session.rename("z")

        assert names(notes_dir) == ["z.md"]
        assert (notes_dir / "z.md").read_text() == "A edited"

    @pytest.mark.asyncio
    async def test_later_edits_follow_new_name(self, session, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")
        await session.rename("z")

        session.edit("after rename")
        await session.flush()

        assert names(notes_dir) == ["z.md"]
        assert (notes_dir / "z.md").read_text() == "after rename"


class TestGeneratedNames:
    """Test renames to the placeholder, which derive the name from content."""

    @pytest.mark.asyncio
    async def test_placeholder_derives_name(self, session, notes_dir, make_note):
        make_note("draft.md", "# Trip ideas\n- Lisbon")
        await session.open(f"{notes_dir.as_posix()}/draft.md")

        result = await session.rename("Untitled")

        assert result.status == "renamed"
        assert names(notes_dir) == ["Trip ideas.md"]

    @pytest.mark.asyncio
    async def test_derived_collision_gets_suffix(self, session, notes_dir, make_note):
        """Test that a generated name is disambiguated instead of blocked."""
        make_note("note.md", "existing")
        make_note("draft.md", "# note\nbody")
        await session.open(f"{notes_dir.as_posix()}/draft.md")

        result = await session.rename("untitled")

        assert result.status == "renamed"
        assert result.identity == Addressed(path=f"{notes_dir.as_posix()}/note (2).md")
        assert names(notes_dir) == ["note (2).md", "note.md"]
        assert (notes_dir / "note.md").read_text() == "existing"

    @pytest.mark.asyncio
    async def test_derived_name_equal_to_current_is_unchanged(self, session, fs, notes_dir, make_note):
        make_note("note.md", "# note\nbody")
        await session.open(f"{notes_dir.as_posix()}/note.md")

        result = await session.rename("Untitled")

        assert result.status == "unchanged"
        assert fs.moves == []

    @pytest.mark.asyncio
    async def test_no_text_is_noop(self, session, notes_dir, make_note):
        make_note("a.md", "\n   \n")
        await session.open(f"{notes_dir.as_posix()}/a.md")

        result = await session.rename("Untitled")

        assert result.status == "noop"
        assert names(notes_dir) == ["a.md"]


class TestDraftRenames:
    """Test renaming a document that was never saved."""

    @pytest.mark.asyncio
    async def test_blank_draft_created_under_name(self, session, notes_dir):
        result = await session.rename("Plan")

        assert result.status == "created"
        assert names(notes_dir) == ["Plan.md"]
        assert (notes_dir / "Plan.md").read_text() == ""
        assert session.document.path == f"{notes_dir.as_posix()}/Plan.md"

    @pytest.mark.asyncio
    async def test_draft_with_content_saved_then_moved(self, session, notes_dir):
        session.edit("hello world")

        result = await session.rename("Plan")

        assert result.status == "renamed"
        assert names(notes_dir) == ["Plan.md"]
        assert (notes_dir / "Plan.md").read_text() == "hello world"

    @pytest.mark.asyncio
    async def test_taken_name_refused_before_draft_is_saved(self, quiet_session, fs, notes_dir, make_note):
        make_note("note.md", "existing")
        quiet_session.edit("hello world")

        result = await quiet_session.rename("note")

        assert result.status == "blocked"
        assert names(notes_dir) == ["note.md"]
        assert fs.writes == []
        assert isinstance(quiet_session.document.identity, Unaddressed)
        assert quiet_session.saver.pending.content == "hello world"

    @pytest.mark.asyncio
    async def test_draft_without_root_is_noop(self, config, fs):
        session = EditorSession(config, None, filesystem=fs)

        result = await session.rename("Plan")

        assert result.status == "noop"


class TestRenameFailures:
    """Test that failures keep the rename field open."""

    @pytest.mark.asyncio
    async def test_move_failure(self, session, fs, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")
        fs.fail_moves = True

        result = await session.rename("z")

        assert result.status == "failed"
        assert result.keep_editing
        assert result.message.startswith("Could not rename document")
        assert names(notes_dir) == ["a.md"]
        assert session.document.path == f"{notes_dir.as_posix()}/a.md"

    @pytest.mark.asyncio
    async def test_flush_failure(self, session, fs, notes_dir, make_note):
        make_note("a.md", "A")
        await session.open(f"{notes_dir.as_posix()}/a.md")
        session.edit("unsaved")
        fs.fail_writes = True

        result = await session.rename("z")

        assert result.status == "failed"
        assert result.keep_editing
        assert fs.moves == []
        assert session.saver.pending.content == "unsaved"


class TestConfiguredExtensions:
    """Test folders that recognize extensions beyond the defaults."""

    @pytest.fixture
    def txt_session(self, notes_dir, fs, clock):
        config = Config(
            notes={"extensions": [".md", ".txt"]},
            autosave={"debounce_ms": 20},
            collisions={"case_policy": "sensitive"},
        )
        return EditorSession(config, notes_dir.as_posix(), filesystem=fs, clock=clock)

    @pytest.mark.asyncio
    async def test_rename_keeps_extension(self, txt_session, notes_dir, make_note):
        make_note("a.txt", "A")
        await txt_session.open(f"{notes_dir.as_posix()}/a.txt")

        result = await txt_session.rename("b")

        assert result.status == "renamed"
        assert names(notes_dir) == ["b.txt"]

    @pytest.mark.asyncio
    async def test_typed_extension_dropped(self, txt_session, notes_dir, make_note):
        make_note("a.txt", "A")
        await txt_session.open(f"{notes_dir.as_posix()}/a.txt")

        result = await txt_session.rename("c.txt")

        assert result.status == "renamed"
        assert names(notes_dir) == ["c.txt"]

    @pytest.mark.asyncio
    async def test_suggestion_and_listing_drop_extension(self, txt_session, notes_dir, make_note):
        make_note("Reading list.txt", "x")
        await txt_session.open(f"{notes_dir.as_posix()}/Reading list.txt")

        assert txt_session.suggest_name() == "Reading list"
        assert [entry.name for entry in await txt_session.find("list")] == ["Reading list"]

    @pytest.mark.asyncio
    async def test_placeholder_file_named_from_content(self, txt_session, notes_dir, make_note):
        make_note("Untitled.txt", "")
        await txt_session.open(f"{notes_dir.as_posix()}/Untitled.txt")

        txt_session.edit("# Packing\n- socks")
        await txt_session.flush()

        assert names(notes_dir) == ["Packing.txt"]


class TestSuggestion:
    """Test the initial text of the rename field."""

    @pytest.mark.asyncio
    async def test_draft_suggests_placeholder(self, session):
        assert session.suggest_name() == "Untitled"

    @pytest.mark.asyncio
    async def test_document_suggests_current_name(self, session, notes_dir, make_note):
        make_note("Meeting notes.md", "x")
        await session.open(f"{notes_dir.as_posix()}/Meeting notes.md")

        assert session.suggest_name() == "Meeting notes"
