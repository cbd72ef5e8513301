import pytest

import slinstall.core.error as errors
import slinstall.core.step as step


def test_default_tolerances():
    table = step.tolerances()

    assert table[step.APT_INSTALL] == step.Tolerance.FATAL
    assert table[step.BUILD] == step.Tolerance.FATAL
    assert table[step.PATCH_DOWNLOAD] == step.Tolerance.FATAL
    assert table[step.SERVICE_ENABLE] == step.Tolerance.BEST_EFFORT
    assert table[step.GIT_PULL] == step.Tolerance.BEST_EFFORT
    assert table[step.PATCH_APPLY] == step.Tolerance.BEST_EFFORT


def test_strict_patches_makes_patch_apply_fatal():
    assert step.tolerances(strict_patches=True)[step.PATCH_APPLY] == step.Tolerance.FATAL
    # the shared default table is not modified
    assert step.DEFAULT_TOLERANCES[step.PATCH_APPLY] == step.Tolerance.BEST_EFFORT


def test_evaluate_success():
    result = step.StepRunner().evaluate(step.BUILD, "Building", 0, "done")

    assert result.ok
    assert result.outcome == step.Outcome.SUCCESS
    assert result.raise_if_fatal() is result


def test_evaluate_best_effort_failure_warns(capsys):
    result = step.StepRunner().evaluate(step.GIT_PULL, "Pulling 'dwm'", 1, "diverged")

    assert not result.ok
    assert result.outcome == step.Outcome.RECOVERABLE
    assert result.raise_if_fatal() is result
    assert "WARNING: Pulling 'dwm' failed (exit code 1)" in capsys.readouterr().out


def test_evaluate_fatal_failure_raises_on_request(capsys):
    result = step.StepRunner().evaluate(step.BUILD, "Building 'dwm'", 2, "error")

    assert result.outcome == step.Outcome.FATAL
    assert "Building 'dwm' failed" in capsys.readouterr().err

    with pytest.raises(errors.StepFailedError) as info:
        result.raise_if_fatal()

    assert info.value.step == step.BUILD
    assert "dwm" in str(info.value)


def test_unknown_step_is_fatal():
    result = step.StepRunner().evaluate("mystery", "Doing something", 1)
    assert result.outcome == step.Outcome.FATAL


def test_run_passes_cwd_and_timeout(fake_run):
    result = step.StepRunner().run(step.GIT_CLONE, "Cloning", ["git", "clone"], "/src", 10)

    assert result.ok
    assert fake_run.calls == [(["git", "clone"], "/src", 10)]


def test_run_classifies_exit_code(fake_run):
    fake_run.fail_when(lambda cmd: cmd[0] == "patch", code=1)
    runner = step.StepRunner(step.tolerances())

    result = runner.run(step.PATCH_APPLY, "Applying", ["patch", "-p1"])

    assert result.outcome == step.Outcome.RECOVERABLE
    assert result.code == 1


def test_dry_run_runs_nothing(fake_run, capsys):
    result = step.StepRunner(dry_run=True).run(step.BUILD, "Building", ["make", "install"])

    assert result.ok
    assert fake_run.calls == []
    assert "make install" in capsys.readouterr().out
