"""Tests for the merge engine."""

from __future__ import annotations

from quotesync.client.records import RecordSource
from quotesync.client.sync.merge import differs, merge


class TestMergeNoMatches:
    """Remote records that match nothing locally."""

    def test_empty_batch_changes_nothing(self, make_record) -> None:  # type: ignore[no-untyped-def]
        local = [make_record("Be kind", "Wisdom"), make_record("Stay calm", "Zen")]

        result = merge(local, [])

        assert result.changed is False
        assert result.conflicts == []
        assert result.merged == local

    def test_new_records_appended_in_order(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        """merge(L, B) == L ++ B when nothing matches."""
        local = [make_record("Be kind", "Wisdom")]
        batch = [make_remote("First"), make_remote("Second")]

        result = merge(local, batch)

        assert result.merged == local + batch
        assert result.changed is True
        assert result.conflicts == []

    def test_inputs_not_mutated(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        local = [make_record("Be kind", "Wisdom")]
        batch = [make_remote("Be kind"), make_remote("New")]
        local_before = list(local)
        batch_before = list(batch)

        merge(local, batch)

        assert local == local_before
        assert batch == batch_before


class TestMergeMatches:
    """Remote records matching local records by text."""

    def test_remote_wins_and_new_appended(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        """'Be kind' conflicts and is replaced; 'New idea' is appended."""
        local = [make_record("Be kind", "Wisdom")]
        batch = [make_remote("Be kind"), make_remote("New idea")]

        result = merge(local, batch)

        assert [(r.text, r.category, r.source) for r in result.merged] == [
            ("Be kind", "Server", RecordSource.REMOTE),
            ("New idea", "Server", RecordSource.REMOTE),
        ]
        assert len(result.conflicts) == 1
        assert result.conflicts[0].local == local[0]
        assert result.conflicts[0].remote == batch[0]
        assert result.changed is True

    def test_case_insensitive_match(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        local = [make_record("Be Kind", "Wisdom")]

        result = merge(local, [make_remote("be kind ")])

        assert len(result.merged) == 1
        assert len(result.conflicts) == 1

    def test_replacement_keeps_position(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        local = [
            make_record("One", "A"),
            make_record("Two", "B"),
            make_record("Three", "C"),
        ]
        remote = make_remote("two")

        result = merge(local, [remote])

        assert result.merged == [local[0], remote, local[2]]

    def test_identical_record_is_no_op(self, make_remote) -> None:  # type: ignore[no-untyped-def]
        """A previously synced remote record does not conflict with itself."""
        local = [make_remote("From server", record_id="server-1")]

        result = merge(local, [make_remote("From server", record_id="server-1")])

        assert result.changed is False
        assert result.conflicts == []
        assert result.merged == local

    def test_source_difference_alone_conflicts(self, make_record) -> None:  # type: ignore[no-untyped-def]
        """Same category, different source is still a conflict."""
        local = [make_record("Shared", "Server")]
        remote = make_record("Shared", "Server", source=RecordSource.REMOTE)

        result = merge(local, [remote])

        assert len(result.conflicts) == 1
        assert result.merged == [remote]

    def test_two_remotes_same_slot_last_wins(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        """Both replace the same local slot; the last applied wins."""
        local = [make_record("Be kind", "Wisdom"), make_record("Other", "Misc")]
        first = make_remote("Be kind", record_id="server-1")
        second = make_remote("BE KIND", record_id="server-2")

        result = merge(local, [first, second])

        assert result.merged == [second, local[1]]
        assert len(result.conflicts) == 2

    def test_duplicate_new_remotes_do_not_duplicate(self, make_remote) -> None:  # type: ignore[no-untyped-def]
        first = make_remote("Fresh", record_id="server-1")
        second = make_remote("fresh", record_id="server-2")

        result = merge([], [first, second])

        assert result.merged == [second]
        assert result.changed is True


class TestMergeIds:
    """Ids stay unique in the merged collection."""

    def test_retitled_remote_gets_fresh_id(self, make_remote) -> None:  # type: ignore[no-untyped-def]
        """The server renamed item 1; the old record keeps its id."""
        local = [make_remote("Old title", record_id="server-1")]

        result = merge(local, [make_remote("New title", record_id="server-1")])

        assert [r.text for r in result.merged] == ["Old title", "New title"]
        assert result.merged[0].id == "server-1"
        assert result.merged[1].id.startswith("server-")
        assert len({r.id for r in result.merged}) == 2

    def test_retitled_remote_is_stable_next_cycle(self, make_remote) -> None:  # type: ignore[no-untyped-def]
        local = [make_remote("Old title", record_id="server-1")]
        batch = [make_remote("New title", record_id="server-1")]
        first = merge(local, batch)

        second = merge(first.merged, batch)

        assert second.changed is False
        assert second.merged == first.merged

    def test_conflict_reports_placed_record(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        """A conflicting remote whose id sits in another slot is re-identified."""
        local = [
            make_remote("Old title", record_id="server-1"),
            make_record("Be kind", "Wisdom"),
        ]

        result = merge(local, [make_remote("Be kind", record_id="server-1")])

        assert len(result.conflicts) == 1
        placed = result.merged[1]
        assert result.conflicts[0].remote == placed
        assert placed.id != "server-1"
        assert placed.text == "Be kind"
        assert len({r.id for r in result.merged}) == 2

    def test_case_variant_locals_match_first_slot(self, make_record, make_remote) -> None:  # type: ignore[no-untyped-def]
        """Only the first of several same-key locals is replaced."""
        local = [
            make_record("Hi", "Greet", record_id="local-1"),
            make_record("hi", "greet", record_id="local-2"),
        ]
        remote = make_remote("hi")

        result = merge(local, [remote])

        assert result.merged == [remote, local[1]]
        assert result.conflicts[0].local == local[0]


class TestDiffers:
    """Tests for the conflict predicate."""

    def test_category_or_source(self, make_record) -> None:  # type: ignore[no-untyped-def]
        base = make_record("T", "A")

        assert not differs(base, make_record("t", "A"))
        assert differs(base, make_record("T", "B"))
        assert differs(base, make_record("T", "A", source=RecordSource.REMOTE))
