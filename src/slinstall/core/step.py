"""
Uniform handling of external provisioning steps.

Every external program slinstall runs is a step of some kind (``apt-install``, ``git-pull``,
``build``, ...). How a failure of a step is treated is not decided where the step is run but
looked up from a tolerance table:

- ``FATAL`` steps abort the run when they fail.
- ``BEST_EFFORT`` steps are reported as warnings and the run continues.
"""

import dataclasses
import enum
import typing

import slinstall.core.command as command
import slinstall.core.error as errors
import slinstall.core.output as output


class Tolerance(enum.Enum):
    FATAL = "fatal"
    BEST_EFFORT = "best-effort"


class Outcome(enum.Enum):
    SUCCESS = "success"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


APT_UPDATE = "apt-update"
APT_UPGRADE = "apt-upgrade"
APT_INSTALL = "apt-install"
SERVICE_ENABLE = "service-enable"
GIT_CLONE = "git-clone"
GIT_PULL = "git-pull"
BUILD = "build"
PATCH_DOWNLOAD = "patch-download"
PATCH_APPLY = "patch-apply"

DEFAULT_TOLERANCES: dict[str, Tolerance] = {
    APT_UPDATE: Tolerance.FATAL,
    APT_UPGRADE: Tolerance.FATAL,
    APT_INSTALL: Tolerance.FATAL,
    SERVICE_ENABLE: Tolerance.BEST_EFFORT,
    GIT_CLONE: Tolerance.FATAL,
    GIT_PULL: Tolerance.BEST_EFFORT,
    BUILD: Tolerance.FATAL,
    PATCH_DOWNLOAD: Tolerance.FATAL,
    PATCH_APPLY: Tolerance.BEST_EFFORT,
}


def tolerances(strict_patches: bool = False) -> dict[str, Tolerance]:
    """
    Returns the tolerance table. With ``strict_patches`` a patch that fails to apply is fatal.
    """
    table = dict(DEFAULT_TOLERANCES)
    if strict_patches:
        table[PATCH_APPLY] = Tolerance.FATAL
    return table


@dataclasses.dataclass(frozen=True, slots=True)
class StepResult:
    """
    Result of running a single step.
    """

    step: str
    label: str
    outcome: Outcome
    code: int = 0
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS

    def raise_if_fatal(self) -> "StepResult":
        """
        Raises ``StepFailedError`` if this result is fatal. Otherwise returns this result.
        """
        if self.outcome == Outcome.FATAL:
            raise errors.StepFailedError(self)
        return self


class StepRunner:
    """
    Runs steps and classifies their results using a tolerance table.

    Set ``dry_run`` to only print the commands that would be run.
    """

    def __init__(
        self, table: typing.Optional[dict[str, Tolerance]] = None, dry_run: bool = False
    ) -> None:
        self.table = table if table is not None else dict(DEFAULT_TOLERANCES)
        self.dry_run = dry_run

    def evaluate(self, step: str, label: str, code: int, text: str = "") -> StepResult:
        """
        Classifies the exit code of a step and reports failures to the user.

        Unknown steps are treated as fatal.
        """
        if code == 0:
            return StepResult(step, label, Outcome.SUCCESS, code, text)

        tolerance = self.table.get(step, Tolerance.FATAL)
        if tolerance == Tolerance.BEST_EFFORT:
            output.print_warning(f"{label} failed (exit code {code}). Continuing.")
            output.print_command_output(text)
            return StepResult(step, label, Outcome.RECOVERABLE, code, text)

        output.print_error(f"{label} failed (exit code {code}).")
        output.print_command_output(text)
        return StepResult(step, label, Outcome.FATAL, code, text)

    def run(
        self,
        step: str,
        label: str,
        cmd: list[str],
        cwd: typing.Optional[str] = None,
        timeout: typing.Optional[float] = None,
    ) -> StepResult:
        """
        Runs a command as the given step and returns its classified result.

        Fatal results are returned, not raised. Use ``StepResult.raise_if_fatal`` to abort.
        """
        output.print_info(f"{label}.")
        if self.dry_run:
            output.print_continuation(" ".join(cmd), level=output.INFO)
            return StepResult(step, label, Outcome.SUCCESS)

        code, text = command.run(cmd, cwd=cwd, timeout=timeout)
        if code == 0:
            output.print_command_output(text)
        return self.evaluate(step, label, code, text)
