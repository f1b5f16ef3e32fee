from forja.core.resources import ApplyStatus, CommonProps
from forja.providers import SystemdUnitResource
from forja.providers.host import CommandResult


class FakeSystemctl:
    def __init__(self, enabled=False, active=False, fail=()):
        self.enabled = enabled
        self.active = active
        self.fail = set(fail)
        self.calls = []

    def __call__(self, argv):
        self.calls.append(argv[1:])
        verb = argv[1]
        if verb in self.fail:
            return CommandResult(" ".join(argv), 1, "", "Unit not found.")
        if verb == "is-enabled":
            return CommandResult(" ".join(argv), 0 if self.enabled else 1)
        if verb == "is-active":
            return CommandResult(" ".join(argv), 0 if self.active else 3)
        return CommandResult(" ".join(argv), 0)


def unit(action, runner, **kwargs):
    return SystemdUnitResource("app.service", runner=runner, common=CommonProps(action=action), **kwargs)


def test_create_writes_unit_and_reloads_daemon(tmp_path):
    runner = FakeSystemctl()
    res = unit("create", runner, content="[Service]\nExecStart=/bin/true\n", unit_dir=tmp_path)
    assert res.apply().is_updated
    assert (tmp_path / "app.service").read_text().startswith("[Service]")
    assert runner.calls == [["daemon-reload"]]
    assert res.apply().status == ApplyStatus.UNCHANGED
    assert runner.calls == [["daemon-reload"]]


def test_enable_is_idempotent():
    runner = FakeSystemctl(enabled=True)
    assert unit("enable", runner).apply().status == ApplyStatus.UNCHANGED
    assert runner.calls == [["is-enabled", "app.service"]]


def test_start_when_inactive():
    runner = FakeSystemctl(active=False)
    assert unit("start", runner).apply().is_updated
    assert runner.calls[-1] == ["start", "app.service"]


def test_restart_always_runs():
    runner = FakeSystemctl(active=True)
    res = unit("nothing", runner)
    assert res.apply().status == ApplyStatus.UNCHANGED
    assert res.apply("restart").is_updated
    assert runner.calls == [["restart", "app.service"]]


def test_reload_or_restart_verb():
    runner = FakeSystemctl()
    unit("reload_or_restart", runner).apply()
    assert runner.calls == [["reload-or-restart", "app.service"]]


def test_systemctl_failure_is_reported():
    runner = FakeSystemctl(fail={"restart"})
    result = unit("restart", runner).apply()
    assert result.is_failed
    assert "Unit not found." in result.reason
