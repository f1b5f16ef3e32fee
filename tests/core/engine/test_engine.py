import pytest

from forja.core.engine import ConvergenceEngine, converge
from forja.core.errors import IdentityConflictError
from forja.core.events import EventType, MemoryEventSink
from tests.support.fakes import BrokenReleaseResource, ConvergingResource, FakeResource, notify


def _raise():
    raise RuntimeError("predicado roto")


class TestIdempotence:
    def test_second_run_reports_unchanged_and_fires_nothing(self):
        state = {}

        def recipe():
            return [
                ConvergingResource("config", state, notifies=[notify("service")]),
                ConvergingResource("service", state, action="nothing"),
            ]

        first = converge(recipe())
        assert first.applied == 2
        assert first.notifications_fired == 1

        second = converge(recipe())
        assert second.applied == 0
        assert second.unchanged == 1
        assert second.skipped == 1
        assert second.notifications_fired == 0
        assert second.success


class TestGuards:
    def test_not_if_truthy_skips(self):
        res = FakeResource("a", not_if=[lambda: True])
        summary = converge([res])
        assert res.calls == []
        assert summary.skipped == 1

    def test_only_if_falsy_skips(self):
        res = FakeResource("a", only_if=[lambda: True, lambda: False])
        summary = converge([res])
        assert res.calls == []
        assert summary.skipped == 1

    def test_all_guards_pass(self):
        res = FakeResource("a", only_if=[lambda: True], not_if=[lambda: False])
        summary = converge([res])
        assert res.calls == ["create"]
        assert summary.applied == 1

    def test_not_if_evaluated_before_only_if(self):
        seen = []
        res = FakeResource(
            "a",
            not_if=[lambda: seen.append("not_if") or True],
            only_if=[lambda: seen.append("only_if") or True],
        )
        converge([res])
        assert seen == ["not_if"]

    def test_action_nothing_is_skipped_with_reason(self):
        events = MemoryEventSink()
        res = FakeResource("a", action="nothing")
        summary = converge([res], events)
        assert res.calls == []
        assert summary.skipped == 1
        skipped = events.of_type(EventType.SKIPPED)
        assert skipped[0].reason == "action :nothing"

    def test_raising_predicate_fails_resource_and_run_continues(self):
        broken = FakeResource("a", only_if=[_raise])
        after = FakeResource("b")
        summary = converge([broken, after])
        assert broken.calls == []
        assert after.calls == ["create"]
        assert summary.failed == 1
        assert summary.skipped == 0
        assert summary.failures[0][0] == "fake[a]"


class TestNotifications:
    def test_delayed_notification_fires_once_after_main_pass(self):
        journal = []
        resources = [
            FakeResource("a", notifies=[notify("c")], journal=journal),
            FakeResource("b", notifies=[notify("c")], journal=journal),
            FakeResource("c", journal=journal),
        ]
        summary = converge(resources)
        assert journal == ["a:create", "b:create", "c:create", "c:restart"]
        assert summary.notifications_fired == 1
        assert summary.applied == 4

    def test_same_target_different_actions_are_distinct(self):
        target = FakeResource("c", action="nothing")
        resources = [
            FakeResource("a", notifies=[notify("c", "restart")]),
            FakeResource("b", notifies=[notify("c", "reload")]),
            target,
        ]
        summary = converge(resources)
        assert target.calls == ["restart", "reload"]
        assert summary.notifications_fired == 2

    def test_immediate_notification_runs_before_next_resource(self):
        journal = []
        target = FakeResource("b", journal=journal)
        resources = [
            FakeResource("a", notifies=[notify("b", timing="immediate")], journal=journal),
            target,
            FakeResource("c", journal=journal),
        ]
        summary = converge(resources)
        assert journal == ["a:create", "b:restart", "c:create"]
        assert target.calls == ["restart"]
        assert summary.via_notification == 1
        assert summary.notifications_fired == 1

    def test_unchanged_source_does_not_notify(self):
        target = FakeResource("b", action="nothing")
        summary = converge([FakeResource("a", outcome="unchanged", notifies=[notify("b")]), target])
        assert target.calls == []
        assert summary.notifications_fired == 0

    def test_failed_source_does_not_notify(self):
        target = FakeResource("b", action="nothing")
        summary = converge([FakeResource("a", outcome="failed", notifies=[notify("b")]), target])
        assert target.calls == []
        assert summary.failed == 1

    def test_notification_reaches_guarded_target(self):
        target = FakeResource("b", not_if=[lambda: True])
        converge([FakeResource("a", notifies=[notify("b")]), target])
        assert target.calls == ["restart"]

    def test_subscription_behaves_like_reverse_notification(self):
        watcher = FakeResource("b", action="nothing", subscribes=[notify("a", "reload")])
        summary = converge([FakeResource("a"), watcher])
        assert watcher.calls == ["reload"]
        assert summary.notifications_fired == 1

    def test_delayed_cascade_from_notified_target(self):
        journal = []
        resources = [
            FakeResource("a", notifies=[notify("b")], journal=journal),
            FakeResource("b", action="nothing", notifies=[notify("c")], journal=journal),
            FakeResource("c", action="nothing", journal=journal),
        ]
        summary = converge(resources)
        assert journal == ["a:create", "b:restart", "c:restart"]
        assert summary.notifications_fired == 2

    def test_delayed_cascade_key_fires_once_per_run(self):
        target = FakeResource("c", action="nothing")
        resources = [
            FakeResource("a", notifies=[notify("b"), notify("c")]),
            FakeResource("b", action="nothing", notifies=[notify("c")]),
            target,
        ]
        converge(resources)
        assert target.calls == ["restart"]

    def test_notification_result_is_recorded(self):
        events = MemoryEventSink()
        target = FakeResource("b", outcome={"restart": "failed"}, action="nothing")
        summary = converge([FakeResource("a", notifies=[notify("b")]), target], events)
        assert summary.failed == 1
        notified = events.of_type(EventType.NOTIFIED)[0]
        assert notified.source == "fake[a]"
        assert notified.data == {"status": "failed", "timing": "delayed"}


class TestFailures:
    def test_failure_does_not_stop_the_run(self):
        after = FakeResource("b")
        summary = converge([FakeResource("a", outcome="failed"), after])
        assert after.calls == ["create"]
        assert summary.failed == 1
        assert summary.applied == 1
        assert not summary.success
        assert summary.exit_code == 1

    @pytest.mark.parametrize("outcome", ["error", "boom"])
    def test_exceptions_from_apply_become_failures(self, outcome):
        summary = converge([FakeResource("a", outcome=outcome), FakeResource("b")])
        assert summary.failed == 1
        assert summary.applied == 1

    def test_ignore_failure_is_counted_apart(self):
        summary = converge([FakeResource("a", outcome="failed", ignore_failure=True)])
        assert summary.failed == 0
        assert summary.ignored_failures == 1
        assert summary.success

    def test_non_result_return_is_a_failure(self):
        res = FakeResource("a")
        res._apply_action = lambda action: "ok"
        summary = converge([res])
        assert summary.failed == 1
        assert "ApplyResult" in summary.failures[0][1]


class TestValidation:
    def test_duplicate_id_aborts_before_applying(self):
        first, second = FakeResource("a"), FakeResource("a")
        summary = converge([first, second])
        assert summary.aborted
        assert not summary.success
        assert summary.applied == 0
        assert first.calls == [] and second.calls == []
        assert "duplicado" in summary.error

    def test_unknown_target_aborts(self):
        summary = converge([FakeResource("a", notifies=[notify("ghost")])])
        assert summary.aborted

    def test_immediate_to_earlier_resource_aborts(self):
        resources = [FakeResource("a"), FakeResource("b", notifies=[notify("a", timing="immediate")])]
        summary = converge(resources)
        assert summary.aborted
        assert resources[0].calls == []

    def test_delayed_to_earlier_resource_is_allowed(self):
        target = FakeResource("a")
        converge([target, FakeResource("b", notifies=[notify("a")])])
        assert target.calls == ["create", "restart"]

    def test_engine_run_raises_on_conflict(self):
        events = MemoryEventSink()
        engine = ConvergenceEngine([FakeResource("a"), FakeResource("a")], events)
        with pytest.raises(IdentityConflictError):
            engine.run()
        assert events.types() == [EventType.ABORTED]


class TestLifecycle:
    def test_every_resource_released_once(self):
        resources = [FakeResource("a", outcome="failed"), FakeResource("b", action="nothing"), FakeResource("c")]
        converge(resources)
        assert [r.release_count for r in resources] == [1, 1, 1]

    def test_resources_released_on_abort(self):
        resources = [FakeResource("a"), FakeResource("a")]
        converge(resources)
        assert all(r.released for r in resources)

    def test_release_error_is_reported_not_raised(self):
        events = MemoryEventSink()
        broken = BrokenReleaseResource("a")
        other = FakeResource("b")
        summary = converge([broken, other], events)
        assert summary.success
        assert other.release_count == 1
        failed = events.of_type(EventType.FAILED)
        assert failed[0].action == "release"

    def test_engine_is_single_use(self):
        engine = ConvergenceEngine([FakeResource("a")])
        engine.run()
        with pytest.raises(RuntimeError):
            engine.run()

    def test_event_stream_frames_the_run(self):
        events = MemoryEventSink()
        converge([FakeResource("a", notifies=[notify("b")]), FakeResource("b", action="nothing")], events)
        assert events.types() == [
            EventType.STARTED,
            EventType.UPDATED,
            EventType.SKIPPED,
            EventType.NOTIFIED,
            EventType.FINISHED,
        ]
