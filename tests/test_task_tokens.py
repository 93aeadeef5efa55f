# tests/test_task_tokens.py

from __future__ import annotations

from datetime import date

from cadence.tasks.task_models import REMOVE, Priority, TaskMetadata
from cadence.tasks.task_tokens import rewrite_token, serialize_metadata


def test_replace_existing_token_in_place() -> None:
    line = "  * [ ] Write report due:2024-01-10 #work"
    out = rewrite_token(line, "due", date(2024, 2, 1))
    assert out == "  * [ ] Write report due:2024-02-01 #work"


def test_append_missing_token_at_line_end() -> None:
    out = rewrite_token("- [ ] Write report   ", "age", 2)
    assert out == "- [ ] Write report age:2"


def test_replace_keeps_unparseable_token_position() -> None:
    out = rewrite_token("- [ ] A age:abc B", "age", 5)
    assert out == "- [ ] A age:5 B"


def test_remove_strips_every_occurrence() -> None:
    line = "- [x] Pay rent created:2024-01-01 note created:2024-01-02"
    assert rewrite_token(line, "created", REMOVE) == "- [x] Pay rent note"


def test_none_behaves_like_remove() -> None:
    assert rewrite_token("- [ ] Call mom due:2024-01-01", "due", None) == "- [ ] Call mom"


def test_remove_token_at_start_of_content() -> None:
    assert rewrite_token("- [ ] due:2024-01-01 Call mom", "due", REMOVE) == "- [ ] Call mom"


def test_priority_normalizes_exclamation_form() -> None:
    assert rewrite_token("- [ ] Deploy !!", "priority", Priority.HIGH) == "- [ ] Deploy priority:high"
    assert rewrite_token("- [ ] Deploy !!! priority:low", "priority", "medium") == (
        "- [ ] Deploy priority:medium"
    )
    assert rewrite_token("- [ ] Deploy ! now", "priority", REMOVE) == "- [ ] Deploy now"


def test_tags_are_replaced_as_a_whole() -> None:
    line = "- [ ] Plan #a trip #b"
    assert rewrite_token(line, "tags", ["x", "y"]) == "- [ ] Plan trip #x #y"
    assert rewrite_token(line, "tags", []) == "- [ ] Plan trip"
    assert rewrite_token(line, "tags", REMOVE) == "- [ ] Plan trip"


def test_removing_everything_keeps_a_task_line() -> None:
    assert rewrite_token("- [ ] #only", "tags", REMOVE) == "- [ ]  "


def test_tab_indent_and_marker_untouched() -> None:
    line = "\t+ [X] Done thing"
    assert rewrite_token(line, "created", date(2024, 1, 1)) == "\t+ [X] Done thing created:2024-01-01"


def test_serialize_canonical_order_skips_unset() -> None:
    meta = TaskMetadata(created=date(2024, 1, 2), priority=Priority.LOW, tags=["t"])
    assert serialize_metadata(meta) == "priority:low created:2024-01-02 #t"
    assert serialize_metadata(TaskMetadata()) == ""
