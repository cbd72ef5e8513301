import os
import stat

import pytest

from slinstall.plugins import xinit as xinit_mod


@pytest.fixture
def xinit(settings):
    plugin = xinit_mod.Xinit(settings)
    plugin.programs = ["nm-applet", "dwmblocks", "picom"]
    plugin.session = "dwm"
    return plugin


def test_render_startup_file():
    content = xinit_mod.render_startup_file(["nm-applet", "picom"], "dwm")
    lines = content.splitlines()

    assert lines[0] == "#!/bin/sh"
    assert "nm-applet &" in lines
    assert "picom &" in lines
    assert lines[-1] == "exec dwm"
    assert lines.index("nm-applet &") < lines.index("picom &") < lines.index("exec dwm")


def test_first_run_writes_file_without_backup(xinit, settings):
    assert xinit.apply() is True

    assert os.path.exists(settings.startup_file)
    assert not os.path.exists(f"{settings.startup_file}.bak")
    assert stat.S_IMODE(os.stat(settings.startup_file).st_mode) == 0o755


def test_existing_file_is_backed_up(xinit, settings):
    with open(settings.startup_file, "w", encoding="utf-8") as file:
        file.write("exec i3\n")

    assert xinit.apply() is True

    with open(f"{settings.startup_file}.bak", encoding="utf-8") as file:
        assert file.read() == "exec i3\n"
    with open(settings.startup_file, encoding="utf-8") as file:
        assert file.read().endswith("exec dwm\n")


def test_second_run_content_is_identical(xinit, settings):
    xinit.apply()
    with open(settings.startup_file, encoding="utf-8") as file:
        first = file.read()

    xinit.apply()

    with open(settings.startup_file, encoding="utf-8") as file:
        assert file.read() == first
    with open(f"{settings.startup_file}.bak", encoding="utf-8") as file:
        assert file.read() == first


def test_dry_run_writes_nothing(xinit, settings):
    assert xinit.apply(dry_run=True) is True
    assert not os.path.exists(settings.startup_file)


def test_write_failure_returns_false(xinit, settings, monkeypatch):
    def fail(self, target):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(xinit_mod.fs.File, "write_to", fail)

    assert xinit.apply() is False
