"""
Tests for EditSession: edits, undo, failure isolation and saving.
"""

from pathlib import Path

import pytest

from crowbar.exceptions import EntryNotFound, LiteralError, MutateError, ParseError
from crowbar.schemas import EditRequest, EntryId, IntegerValue, RunResult
from crowbar.session import EditSession


@pytest.fixture
def session(sample_copy):
    return EditSession.from_file(sample_copy)


class FakeRunner:
    def __init__(self):
        self.sources = []

    def run(self, source):
        self.sources.append(source)
        return RunResult(stage="run", success=True, returncode=0, stdout="ok\n")


class TestEditing:

    def test_open(self, session, sample_text):
        assert session.text == sample_text
        assert len(session.catalog) == 10
        assert not session.dirty
        assert not session.can_undo

    def test_set_value_from_text(self, session):
        result = session.set_value("x", "42")
        assert result.changed
        assert "let x: i32 = 42;" in session.text
        assert session.dirty
        assert session.can_undo

    def test_set_value_by_occurrence(self, session):
        session.set_value("x#1", 255)
        assert "let x = 0xFF;" in session.text
        session.set_value("x", 16, occurrence=1)
        assert "let x = 0x10;" in session.text
        assert "let x: i32 = 5;" in session.text

    def test_set_value_accepts_models(self, session):
        session.set_value(EntryId(name="offset"), IntegerValue(value=-1))
        assert "let offset = -1;" in session.text

    def test_catalog_follows_edits(self, session):
        session.set_value("name", "world")
        entry = next(e for e in session.catalog if e.name == "name")
        assert entry.value.value == "world"

    def test_catalog_is_a_copy(self, session):
        session.catalog.clear()
        assert len(session.catalog) == 10

    def test_noop_edit_adds_no_history(self, session, sample_text):
        result = session.set_value("x", 5)
        assert not result.changed
        assert session.text == sample_text
        assert not session.can_undo

    def test_undo(self, session, sample_text):
        session.set_value("x", "1")
        session.set_value("verbose", "true")
        assert session.undo()
        assert "let verbose = false;" in session.text
        assert "let x: i32 = 1;" in session.text
        assert session.undo()
        assert session.text == sample_text
        assert not session.dirty
        assert not session.undo()

    def test_load_text_is_undoable(self, session, sample_text):
        session.load_text("fn main() { let a = 1; }")
        assert [e.name for e in session.catalog] == ["a"]
        session.undo()
        assert session.text == sample_text


class TestFailures:

    def test_bad_literal_keeps_state(self, session, sample_text):
        with pytest.raises(LiteralError):
            session.set_value("ratio", "abc")
        assert session.text == sample_text
        assert isinstance(session.last_error, LiteralError)

    def test_unknown_entry(self, session):
        with pytest.raises(EntryNotFound):
            session.set_value("missing", "1")
        assert isinstance(session.last_error, EntryNotFound)

    def test_parse_error_keeps_state(self, session, sample_text):
        catalog = session.catalog
        with pytest.raises(ParseError):
            session.load_text("fn main() { let x = (1; }")
        assert session.text == sample_text
        assert session.catalog == catalog
        assert isinstance(session.last_error, ParseError)

    def test_success_clears_last_error(self, session):
        with pytest.raises(EntryNotFound):
            session.set_value("missing", "1")
        session.set_value("x", "2")
        assert session.last_error is None

    def test_apply_all_is_atomic(self, session, sample_text):
        requests = [
            EditRequest(entry_id=EntryId(name="x"), value=IntegerValue(value=1)),
            EditRequest(entry_id=EntryId(name="nope"), value=IntegerValue(value=1)),
        ]
        with pytest.raises(EntryNotFound):
            session.apply_all(requests)
        assert session.text == sample_text
        assert not session.can_undo

    def test_apply_all_is_one_undo_step(self, session, sample_text):
        session.apply_all([
            EditRequest(entry_id=EntryId(name="x"), value=IntegerValue(value=1)),
            EditRequest(entry_id=EntryId(name="x", occurrence=1), value=IntegerValue(value=2)),
        ])
        assert "let x = 0x2;" in session.text
        session.undo()
        assert session.text == sample_text


class TestSave:

    def test_save_with_backup(self, session, sample_copy, sample_text):
        session.set_value("x", "7")
        backup = session.save()

        with open(sample_copy, "r", encoding="utf-8", newline="") as f:
            assert f.read() == session.text
        assert backup is not None
        assert Path(backup).read_text(encoding="utf-8") == sample_text.replace("\r\n", "\n")
        assert not session.dirty

    def test_save_without_backup(self, session):
        session.set_value("x", "7")
        assert session.save(backup=False) is None

    def test_save_twice(self, session):
        session.set_value("x", "7")
        session.save()
        session.set_value("x", "8")
        session.save()
        assert "let x: i32 = 8;" in Path(session.file_path).read_text(encoding="utf-8")

    def test_external_modification_refused(self, session, sample_copy):
        sample_copy.write_text("fn main() {}\n", encoding="utf-8")
        session.set_value("x", "7")
        with pytest.raises(MutateError):
            session.save()
        assert sample_copy.read_text(encoding="utf-8") == "fn main() {}\n"
        assert isinstance(session.last_error, MutateError)

    def test_save_elsewhere(self, session, isolated_project):
        session.set_value("x", "7")
        target = isolated_project / "copy.rs"
        session.save(target)
        assert "let x: i32 = 7;" in target.read_text(encoding="utf-8")
        assert session.dirty

    def test_no_path(self):
        session = EditSession()
        session.load_text("fn main() { let a = 1; }")
        with pytest.raises(MutateError):
            session.save()


class TestRun:

    def test_run_uses_snapshot(self, session):
        runner = FakeRunner()
        session.set_value("x", "3")
        result = session.run(runner)
        assert result.success
        assert runner.sources == [session.snapshot()]
