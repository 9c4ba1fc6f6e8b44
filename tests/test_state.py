"""Tests for the file status state machine and the file queue."""

import pytest
from conftest import make_file

from ocrdoc.errors import FileNotFoundInSessionError, InvalidTransitionError
from ocrdoc.processing.state import (
    FileQueue,
    FileStatus,
    complete,
    fail,
    new_file_id,
    reset,
    start_processing,
)


class TestTransitions:
    """Tests for the pure transition functions."""

    def test_happy_path(self) -> None:
        file = make_file("a")
        processing = start_processing(file)
        done = complete(processing, "hello", 0.8)

        assert file.status == FileStatus.PENDING
        assert processing.status == FileStatus.PROCESSING
        assert done.status == FileStatus.COMPLETED
        assert done.extracted_text == "hello"
        assert done.confidence == 0.8

    def test_fail_stores_no_text(self) -> None:
        failed = fail(start_processing(make_file("a")), "boom")
        assert failed.status == FileStatus.ERROR
        assert failed.extracted_text is None
        assert failed.error_message == "boom"

    def test_cannot_complete_pending(self) -> None:
        with pytest.raises(InvalidTransitionError):
            complete(make_file("a"), "text", 0.8)

    def test_cannot_restart_completed(self) -> None:
        done = make_file("a", status=FileStatus.COMPLETED, text="x")
        with pytest.raises(InvalidTransitionError):
            start_processing(done)

    def test_cannot_fail_pending(self) -> None:
        with pytest.raises(InvalidTransitionError):
            fail(make_file("a"), "boom")

    @pytest.mark.parametrize("status", [FileStatus.COMPLETED, FileStatus.ERROR])
    def test_reset_terminal_file(self, status: FileStatus) -> None:
        restored = reset(make_file("a", status=status, text="x"))
        assert restored.status == FileStatus.PENDING
        assert restored.extracted_text is None

    def test_reset_pending_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError):
            reset(make_file("a"))

    def test_transition_returns_new_record(self) -> None:
        file = make_file("a")
        assert start_processing(file) is not file
        assert file.status == FileStatus.PENDING


class TestFileIds:
    """Tests for id generation."""

    def test_ids_are_unique(self) -> None:
        ids = {new_file_id() for _ in range(500)}
        assert len(ids) == 500


class TestFileQueue:
    """Tests for the ordered FileQueue."""

    def test_preserves_insertion_order(self) -> None:
        queue = FileQueue()
        for file_id in ("c", "a", "b"):
            queue.add(make_file(file_id))
        assert [f.id for f in queue] == ["c", "a", "b"]

    def test_replace_keeps_position(self) -> None:
        queue = FileQueue()
        for file_id in ("a", "b", "c"):
            queue.add(make_file(file_id))
        queue.replace(start_processing(queue.get("b")))

        assert [f.id for f in queue] == ["a", "b", "c"]
        assert queue.get("b").status == FileStatus.PROCESSING

    def test_duplicate_id_rejected(self) -> None:
        queue = FileQueue()
        queue.add(make_file("a"))
        with pytest.raises(ValueError):
            queue.add(make_file("a"))

    def test_get_unknown_raises(self) -> None:
        with pytest.raises(FileNotFoundInSessionError):
            FileQueue().get("missing")

    def test_remove(self) -> None:
        queue = FileQueue()
        queue.add(make_file("a"))
        removed = queue.remove("a")
        assert removed.id == "a"
        assert len(queue) == 0
        assert "a" not in queue

    def test_status_filters_and_counts(self) -> None:
        queue = FileQueue()
        queue.add(make_file("a", status=FileStatus.COMPLETED, text="x"))
        queue.add(make_file("b"))
        queue.add(make_file("c", status=FileStatus.ERROR))
        queue.add(make_file("d"))

        assert [f.id for f in queue.pending()] == ["b", "d"]
        assert [f.id for f in queue.completed()] == ["a"]
        assert queue.status_counts() == {
            "pending": 2,
            "processing": 0,
            "completed": 1,
            "error": 1,
        }
