import typing

if typing.TYPE_CHECKING:
    from slinstall.core.step import StepResult


class StepFailedError(Exception):
    """
    Raised when a provisioning step that must not fail failed. The run should be aborted.

    Attributes:
        step (str): Kind of the step, for example ``build``.
        label (str): Human readable description naming what was being done.
        result (StepResult): Result of the failed step.
    """

    def __init__(self, result: "StepResult") -> None:
        self.step = result.step
        self.label = result.label
        self.result = result
        super().__init__(
            f"Step '{result.step}' failed: {result.label} (exit code {result.code})."
        )


class PatchDownloadError(Exception):
    """
    Raised when downloading a patch fails.
    """

    def __init__(self, patch: str, url: str, message: str) -> None:
        self.patch = patch
        self.url = url
        self.message = message
        super().__init__(f"Failed to download patch '{patch}' from '{url}': {message}")


class DependencyCycleError(Exception):
    """
    Raised when source projects require each other.
    """

    def __init__(self, project1: str, project2: str) -> None:
        self.projects = (project1, project2)
        super().__init__(
            f"Source project dependency cycle detected involving '{project1}' and '{project2}'."
        )


class UnknownRequirementError(Exception):
    """
    Raised when a source project requires a project that isn't defined.
    """

    def __init__(self, project: str, requirement: str) -> None:
        self.project = project
        self.requirement = requirement
        super().__init__(
            f"Source project '{project}' requires '{requirement}', which is not defined."
        )


class LockHeldError(Exception):
    """
    Raised when another slinstall process is already provisioning the system.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Another slinstall process is running (lock file: '{path}').")
