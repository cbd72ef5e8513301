import types
import typing

import pytest

import slinstall.config as config
import slinstall.core.output as output


@pytest.fixture(autouse=True)
def reset_output():
    # snapshot & restore config flags between tests
    orig = types.SimpleNamespace(
        debug_output=config.debug_output,
        quiet_output=config.quiet_output,
        color_output=config.color_output,
    )
    config.color_output = False
    yield
    output.close_log()
    config.debug_output = orig.debug_output
    config.quiet_output = orig.quiet_output
    config.color_output = orig.color_output


@pytest.fixture
def settings(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return config.Settings.for_home(str(home))


class FakeRun:
    """
    Replacement for ``command.run`` that records calls and returns scripted results.

    Commands succeed unless a rule added with ``fail_when`` matches them.
    """

    def __init__(self):
        self.calls: list[tuple[list[str], str | None, float | None]] = []
        self.rules: list[tuple[typing.Callable, str | None, int, str]] = []
        self.effects: list[typing.Callable] = []

    def fail_when(self, predicate, code: int = 1, text: str = "failed", cwd: str | None = None):
        self.rules.append((predicate, cwd, code, text))

    def on_call(self, effect):
        self.effects.append(effect)

    def __call__(self, cmd, cwd=None, timeout=None, env_overrides=None):
        self.calls.append((list(cmd), cwd, timeout))
        for predicate, rule_cwd, code, text in self.rules:
            if predicate(cmd) and (rule_cwd is None or rule_cwd == cwd):
                return code, text
        for effect in self.effects:
            effect(cmd, cwd)
        return 0, ""

    def commands(self) -> list[list[str]]:
        return [c for c, _, _ in self.calls]


@pytest.fixture
def fake_run(monkeypatch):
    import slinstall.core.command as command

    fake = FakeRun()
    monkeypatch.setattr(command, "run", fake)
    monkeypatch.setattr(command.os, "geteuid", lambda: 1000)
    return fake
