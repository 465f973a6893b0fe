"""Tests for SyncEngine."""

import pytest

from skillsync.core.errors import BackendFailure, TargetExists, ToolNotInstalled
from skillsync.core.models import ConflictChoice
from skillsync.core.sync_engine import ConflictPolicy, SyncStatus


class TestSyncOne:
    @pytest.mark.anyio
    async def test_records_target(self, engine, make_skill):
        skill = make_skill()

        target = await engine.sync_one(skill, "a")

        assert target.target_path == "/tools/a/review"
        assert skill.tool_ids == ["a"]

    @pytest.mark.anyio
    async def test_target_exists_propagates_without_retry(self, engine, backend, make_skill):
        backend.occupy("review", "a")
        skill = make_skill()

        with pytest.raises(TargetExists) as exc_info:
            await engine.sync_one(skill, "a")

        assert exc_info.value.path == "/tools/a/review"
        assert backend.calls == [("materialize", "a", False)]
        assert skill.targets == []

    @pytest.mark.anyio
    async def test_overwrite_replaces_occupied_target(self, engine, backend, make_skill):
        backend.occupy("review", "a")
        skill = make_skill()

        await engine.sync_one(skill, "a", overwrite=True)

        assert skill.is_synced_to("a")

    @pytest.mark.anyio
    async def test_other_errors_propagate_unchanged(self, engine, backend, make_skill):
        error = ToolNotInstalled("a", "/tools/a")
        backend.failures["a"] = error

        with pytest.raises(ToolNotInstalled) as exc_info:
            await engine.sync_one(make_skill(), "a")

        assert exc_info.value is error


class TestUnsyncOne:
    @pytest.mark.anyio
    async def test_removes_target(self, engine, backend, make_skill):
        skill = make_skill(targets=["a", "b"])

        await engine.unsync_one(skill, "a")

        assert skill.tool_ids == ["b"]
        assert backend.calls == [("dematerialize", "a")]

    @pytest.mark.anyio
    async def test_second_call_is_noop(self, engine, backend, make_skill):
        """Unsyncing an absent target succeeds without contacting the backend."""
        skill = make_skill(targets=["a"])

        await engine.unsync_one(skill, "a")
        await engine.unsync_one(skill, "a")

        assert backend.call_names() == ["dematerialize"]


class TestToggle:
    @pytest.mark.anyio
    async def test_syncs_when_absent(self, engine, make_skill):
        skill = make_skill()

        result = await engine.toggle(skill, "a")

        assert result.status is SyncStatus.SYNCED
        assert [t.tool_id for t in skill.targets] == ["a"]

    @pytest.mark.anyio
    async def test_unsyncs_when_present_without_prompt(self, engine, frontend, make_skill):
        skill = make_skill(targets=["a"])

        result = await engine.toggle(skill, "a")

        assert result.status is SyncStatus.UNSYNCED
        assert not skill.is_synced_to("a")
        assert frontend.conflict_prompts == []

    @pytest.mark.anyio
    async def test_conflict_accepted_overwrites(self, engine, backend, frontend, make_skill):
        backend.occupy("review", "a")
        frontend.answers = [ConflictChoice.OVERWRITE]
        skill = make_skill()

        result = await engine.toggle(skill, "a")

        assert result.status is SyncStatus.OVERWRITTEN
        assert skill.is_synced_to("a")
        assert backend.calls == [("materialize", "a", False), ("materialize", "a", True)]
        assert frontend.conflict_prompts == [("Review", "Tool A", "/tools/a/review", False)]

    @pytest.mark.anyio
    async def test_conflict_declined_leaves_state(self, engine, backend, frontend, make_skill):
        backend.occupy("review", "a")
        frontend.answers = [ConflictChoice.SKIP]
        skill = make_skill()

        result = await engine.toggle(skill, "a")

        assert result.status is SyncStatus.SKIPPED
        assert skill.targets == []
        assert backend.calls == [("materialize", "a", False)]

    @pytest.mark.anyio
    async def test_unknown_tool_label_falls_back_to_id(self, engine, backend, frontend, make_skill):
        backend.occupy("review", "zed")
        frontend.answers = [ConflictChoice.SKIP]

        await engine.toggle(make_skill(), "zed")

        assert frontend.conflict_prompts[0][1] == "zed"


class TestSyncBatch:
    @pytest.mark.anyio
    async def test_skip_policy_skips_occupied_silently(self, engine, backend, frontend, make_skill):
        backend.occupy("review", "b")
        skill = make_skill()

        batch = await engine.sync_batch(skill, ["a", "b", "c"], ConflictPolicy.SKIP)

        assert sorted(skill.tool_ids) == ["a", "c"]
        assert batch.synced == ["a", "c"]
        assert batch.skipped == ["b"]
        assert frontend.conflict_prompts == []

    @pytest.mark.anyio
    async def test_overwrite_all_applies_to_remaining(self, engine, backend, frontend, make_skill):
        backend.occupy("review", "b")
        backend.occupy("review", "c")
        frontend.answers = [ConflictChoice.OVERWRITE_ALL]
        skill = make_skill()

        batch = await engine.sync_batch(skill, ["a", "b", "c"], ConflictPolicy.CONFIRM)

        assert len(frontend.conflict_prompts) == 1
        assert frontend.conflict_prompts[0][1:] == ("Tool B", "/tools/b/review", True)
        assert batch.results["b"].status is SyncStatus.OVERWRITTEN
        assert batch.results["c"].status is SyncStatus.OVERWRITTEN
        assert sorted(skill.tool_ids) == ["a", "b", "c"]

    @pytest.mark.anyio
    async def test_confirm_prompts_per_target(self, engine, backend, frontend, make_skill):
        backend.occupy("review", "a")
        backend.occupy("review", "c")
        frontend.answers = [ConflictChoice.SKIP, ConflictChoice.OVERWRITE]
        skill = make_skill()

        batch = await engine.sync_batch(skill, ["a", "b", "c"])

        assert [p[3] for p in frontend.conflict_prompts] == [True, False]
        assert batch.results["a"].status is SyncStatus.SKIPPED
        assert batch.results["b"].status is SyncStatus.SYNCED
        assert batch.results["c"].status is SyncStatus.OVERWRITTEN

    @pytest.mark.anyio
    async def test_failure_does_not_stop_batch(self, engine, backend, make_skill):
        backend.failures["a"] = BackendFailure("disk full")
        skill = make_skill()

        batch = await engine.sync_batch(skill, ["a", "b", "c"])

        assert batch.failed == ["a"]
        assert str(batch.results["a"].error) == "disk full"
        assert sorted(skill.tool_ids) == ["b", "c"]

    @pytest.mark.anyio
    async def test_tools_processed_in_given_order(self, engine, backend, make_skill):
        await engine.sync_batch(make_skill(), ["c", "a", "b", "a"])

        assert [call[1] for call in backend.calls] == ["c", "a", "b"]

    @pytest.mark.anyio
    async def test_failed_overwrite_is_recorded(self, engine, backend, frontend, make_skill):
        """An overwrite that fails is recorded, and the batch moves on."""
        backend.occupy("review", "a")
        frontend.answers = [ConflictChoice.OVERWRITE]

        original = backend.materialize

        async def failing_overwrite(central_path, skill_id, tool_id, skill_name, overwrite=False):
            if overwrite:
                raise BackendFailure("permission denied")
            return await original(central_path, skill_id, tool_id, skill_name, overwrite)

        backend.materialize = failing_overwrite
        skill = make_skill()

        batch = await engine.sync_batch(skill, ["a", "b"])

        assert batch.results["a"].status is SyncStatus.FAILED
        assert batch.results["b"].status is SyncStatus.SYNCED

    @pytest.mark.anyio
    async def test_empty_batch(self, engine, frontend, make_skill):
        batch = await engine.sync_batch(make_skill(), [])

        assert batch.results == {}
        assert frontend.conflict_prompts == []
