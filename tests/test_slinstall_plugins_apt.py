import dataclasses

import pytest

from slinstall.plugins import apt as apt_mod


@pytest.fixture
def apt(settings):
    plugin = apt_mod.Apt(settings)
    plugin.groups = [
        apt_mod.PackageGroup("core", ("git", "make")),
        apt_mod.PackageGroup("empty", ()),
        apt_mod.PackageGroup("fonts", ("fonts-dejavu",)),
    ]
    return plugin


def test_available_depends_on_apt(monkeypatch, apt):
    monkeypatch.setattr(apt_mod.shutil, "which", lambda name: "/usr/bin/apt")
    assert apt.available() is True

    monkeypatch.setattr(apt_mod.shutil, "which", lambda name: None)
    assert apt.available() is False


def test_apply_updates_then_installs_each_group(fake_run, apt):
    assert apt.apply() is True

    assert fake_run.commands() == [
        ["sudo", "apt", "update"],
        ["sudo", "apt", "full-upgrade", "-y"],
        ["sudo", "apt", "install", "-y", "git", "make"],
        ["sudo", "apt", "install", "-y", "fonts-dejavu"],
    ]


def test_apply_without_upgrade(fake_run, apt):
    apt.settings = dataclasses.replace(apt.settings, upgrade_system=False)

    assert apt.apply() is True
    assert fake_run.commands()[0] == ["sudo", "apt", "install", "-y", "git", "make"]


def test_failed_group_aborts_and_is_named(fake_run, apt, capsys):
    fake_run.fail_when(lambda cmd: "git" in cmd, code=100, text="E: Unable to locate package")

    assert apt.apply() is False

    # the fonts group is never attempted
    assert ["sudo", "apt", "install", "-y", "fonts-dejavu"] not in fake_run.commands()
    err = capsys.readouterr().err
    assert "core package group" in err


def test_failed_upgrade_aborts(fake_run, apt):
    fake_run.fail_when(lambda cmd: "full-upgrade" in cmd)

    assert apt.apply() is False
    assert len(fake_run.calls) == 2


def test_second_run_issues_same_requests(fake_run, apt):
    apt.apply()
    first = fake_run.commands()
    fake_run.calls.clear()

    apt.apply()

    assert fake_run.commands() == first


def test_dry_run_runs_nothing(fake_run, apt, capsys):
    assert apt.apply(dry_run=True) is True
    assert fake_run.calls == []
    assert "apt install -y git make" in capsys.readouterr().out
