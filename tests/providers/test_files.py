import os
import stat

import pytest

from forja.core.resources import ApplyStatus, CommonProps
from forja.providers import DirectoryResource, FileResource, LinkResource


def mode_of(path):
    return stat.S_IMODE(path.stat().st_mode)


class TestFile:
    def test_create_then_unchanged(self, tmp_path):
        path = tmp_path / "app.conf"
        res = FileResource(path, content="port=80\n", mode=0o640)
        first = res.apply()
        assert first.status == ApplyStatus.UPDATED
        assert first.reason == "creado"
        assert path.read_text() == "port=80\n"
        assert mode_of(path) == 0o640
        assert res.apply().status == ApplyStatus.UNCHANGED

    def test_content_change_keeps_diff(self, tmp_path):
        path = tmp_path / "app.conf"
        path.write_text("port=80\n")
        res = FileResource(path, content="port=8080\n")
        result = res.apply()
        assert result.reason == "contenido actualizado"
        assert "+port=8080" in res.last_diff

    def test_mode_only_change(self, tmp_path):
        path = tmp_path / "app.conf"
        path.write_text("x")
        os.chmod(path, 0o600)
        result = FileResource(path, content="x", mode=0o644).apply()
        assert result.is_updated
        assert mode_of(path) == 0o644

    def test_create_if_missing_leaves_existing(self, tmp_path):
        path = tmp_path / "app.conf"
        path.write_text("manual")
        res = FileResource(path, content="gestionado", common=CommonProps(action="create_if_missing"))
        assert res.apply().status == ApplyStatus.UNCHANGED
        assert path.read_text() == "manual"

    def test_delete(self, tmp_path):
        path = tmp_path / "old.conf"
        path.write_text("x")
        res = FileResource(path, common=CommonProps(action="delete"))
        assert res.apply().is_updated
        assert not path.exists()
        assert res.apply().status == ApplyStatus.UNCHANGED

    def test_unsupported_action_fails(self, tmp_path):
        result = FileResource(tmp_path / "a").apply("restart")
        assert result.is_failed
        assert "no soportada" in result.reason

    def test_released_resource_refuses_apply(self, tmp_path):
        res = FileResource(tmp_path / "a", content="x")
        res.release()
        assert res.apply().is_failed
        assert not (tmp_path / "a").exists()

    def test_io_error_becomes_failed(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("no soy un directorio")
        result = FileResource(blocker / "child.conf", content="x").apply()
        assert result.is_failed

    def test_new_file_without_mode_follows_umask(self, tmp_path):
        path = tmp_path / "nuevo.conf"
        previous = os.umask(0o022)
        try:
            assert FileResource(path, content="x").apply().is_updated
        finally:
            os.umask(previous)
        assert mode_of(path) == 0o644

    def test_identity(self, tmp_path):
        assert str(FileResource(tmp_path / "a").identity()) == f"file[{tmp_path / 'a'}]"


class TestDirectory:
    def test_create_and_idempotent(self, tmp_path):
        path = tmp_path / "data"
        res = DirectoryResource(path, mode=0o750)
        assert res.apply().is_updated
        assert path.is_dir()
        assert mode_of(path) == 0o750
        assert res.apply().status == ApplyStatus.UNCHANGED

    def test_missing_parent_requires_recursive(self, tmp_path):
        path = tmp_path / "a" / "b"
        assert DirectoryResource(path).apply().is_failed
        assert DirectoryResource(path, recursive=True).apply().is_updated
        assert path.is_dir()

    def test_file_in_the_way_fails(self, tmp_path):
        path = tmp_path / "data"
        path.write_text("x")
        result = DirectoryResource(path).apply()
        assert result.is_failed
        assert "no es un directorio" in result.reason

    def test_recursive_delete(self, tmp_path):
        path = tmp_path / "data"
        (path / "sub").mkdir(parents=True)
        res = DirectoryResource(path, recursive=True, common=CommonProps(action="delete"))
        assert res.apply().is_updated
        assert not path.exists()


class TestLink:
    def test_create_redirect_and_unchanged(self, tmp_path):
        a, b = tmp_path / "a", tmp_path / "b"
        a.write_text("a")
        b.write_text("b")
        link = tmp_path / "current"

        assert LinkResource(link, a).apply().is_updated
        assert LinkResource(link, a).apply().status == ApplyStatus.UNCHANGED
        result = LinkResource(link, b).apply()
        assert result.is_updated
        assert os.readlink(link) == str(b)

    def test_refuses_to_replace_regular_file(self, tmp_path):
        path = tmp_path / "current"
        path.write_text("real")
        result = LinkResource(path, tmp_path / "x").apply()
        assert result.is_failed
        assert path.read_text() == "real"

    @pytest.mark.parametrize("exists", [True, False])
    def test_delete(self, tmp_path, exists):
        link = tmp_path / "current"
        if exists:
            link.symlink_to(tmp_path)
        result = LinkResource(link, tmp_path, common=CommonProps(action="delete")).apply()
        assert result.is_updated == exists
        assert not link.is_symlink()
