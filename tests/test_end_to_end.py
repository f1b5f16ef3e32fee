from forja.core.engine import converge
from forja.core.events import EventType, MemoryEventSink
from forja.core.runtime import load_settings
from forja.loader import load_recipe
from tests.support.recipes import duplicate_recipe, reload_recipe


def run(recipe, tmp_path, events=None):
    settings = load_settings({"FORJA_STATE_DIR": str(tmp_path / "state")})
    return converge(load_recipe(recipe, settings), events)


def test_config_change_triggers_reload_once(tmp_path):
    recipe = reload_recipe(tmp_path)
    events = MemoryEventSink()

    first = run(recipe, tmp_path, events)
    assert (first.applied, first.skipped, first.notifications_fired) == (2, 1, 1)
    assert first.success
    assert (tmp_path / "app.conf").read_text() == "port=80\n"
    assert (tmp_path / "reloads.log").read_text() == "reloaded\n"
    notified = events.of_type(EventType.NOTIFIED)
    assert [(e.resource, e.source) for e in notified] == [("execute[reload]", f"file[{tmp_path}/app.conf]")]

    second = run(recipe, tmp_path)
    assert (second.applied, second.unchanged, second.skipped, second.notifications_fired) == (0, 1, 1, 0)
    assert (tmp_path / "reloads.log").read_text() == "reloaded\n"


def test_drifted_file_is_repaired_and_reload_fires_again(tmp_path):
    recipe = reload_recipe(tmp_path)
    run(recipe, tmp_path)
    (tmp_path / "app.conf").write_text("port=9999\n")

    summary = run(recipe, tmp_path)
    assert summary.applied == 2
    assert (tmp_path / "app.conf").read_text() == "port=80\n"
    assert (tmp_path / "reloads.log").read_text() == "reloaded\nreloaded\n"


def test_duplicate_resources_abort_without_touching_host(tmp_path):
    summary = run(duplicate_recipe(tmp_path), tmp_path)
    assert summary.aborted
    assert not (tmp_path / "a").exists()
