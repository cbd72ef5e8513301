import dataclasses
import os
import shutil
import typing

import slinstall.config as config
import slinstall.core.command as command
import slinstall.core.error as errors
import slinstall.core.output as output
import slinstall.core.step as step
import slinstall.plugins as plugins


@dataclasses.dataclass(frozen=True, slots=True)
class SourceProject:
    """
    A source tree that is cloned, compiled and installed with make.

    ``requires`` names projects that must be installed before this one is built.
    """

    name: str
    url: str
    requires: tuple[str, ...] = ()


def build_order(projects: typing.Iterable[SourceProject]) -> list[SourceProject]:
    """
    Returns the projects ordered so that every project comes after the projects it requires.
    Projects whose requirements are already satisfied keep their declaration order.

    Raises:
        ``UnknownRequirementError``
            If a project requires a project that isn't in ``projects``.

        ``DependencyCycleError``
            If projects require each other.
    """
    remaining = list(projects)
    names = {p.name for p in remaining}

    for project in remaining:
        for requirement in project.requires:
            if requirement not in names:
                raise errors.UnknownRequirementError(project.name, requirement)

    ordered: list[SourceProject] = []
    done: set[str] = set()

    while remaining:
        ready = [p for p in remaining if all(r in done for r in p.requires)]

        if not ready:
            blocked = remaining[0]
            missing = next(r for r in blocked.requires if r not in done)
            raise errors.DependencyCycleError(blocked.name, missing)

        for project in ready:
            ordered.append(project)
            done.add(project.name)

        remaining = [p for p in remaining if p.name not in done]

    return ordered


class SourcesCommands:
    """
    Default commands for the Sources plugin.
    """

    def git_clone(self, repo: str, dest: str) -> list[str]:
        """
        Running this command clones a git repository to the given destination.
        """
        return ["git", "clone", repo, dest]

    def git_pull(self, repo_dir: str) -> list[str]:
        """
        Running this command updates the repository if it can be fast-forwarded.
        """
        return ["git", "-C", repo_dir, "pull", "--ff-only"]

    def make_clean_install(self) -> list[str]:
        """
        Running this command compiles and installs the project in the current working directory.
        """
        return command.as_root(["make", "clean", "install"])


class Sources(plugins.Plugin):
    """
    Plugin that keeps working copies of source projects up to date and builds them.

    A missing working copy is cloned, an existing one is fast-forwarded. A failing pull keeps the
    existing tree, since it usually contains deliberate local edits. Failing to clone or build a
    project aborts the run.
    """

    NAME = "sources"

    def __init__(self, settings: config.Settings) -> None:
        super().__init__(settings)
        self.projects: list[SourceProject] = []
        self.commands = SourcesCommands()

    def available(self) -> bool:
        return shutil.which("git") is not None and shutil.which("make") is not None

    def apply(self, dry_run: bool = False) -> bool:
        runner = self.runner(dry_run)

        try:
            ordered = build_order(self.projects)
        except (errors.UnknownRequirementError, errors.DependencyCycleError) as error:
            output.print_error(str(error))
            return False

        output.print_list("Building source projects in order:", [p.name for p in ordered])

        for project in ordered:
            try:
                self.fetch(runner, project).raise_if_fatal()
                self.build(runner, project).raise_if_fatal()
            except errors.StepFailedError as error:
                output.print_error(f"Provisioning '{project.name}' failed: {error.label}.")
                return False
        return True

    def is_present(self, project: SourceProject) -> bool:
        """
        Returns True if a working copy of the project exists.
        """
        return os.path.isdir(os.path.join(self.settings.project_dir(project.name), ".git"))

    def fetch(self, runner: step.StepRunner, project: SourceProject) -> step.StepResult:
        """
        Clones the project if it's missing. Otherwise pulls the latest changes.
        """
        path = self.settings.project_dir(project.name)

        if self.is_present(project):
            return runner.run(
                step.GIT_PULL,
                f"Pulling latest changes for '{project.name}'",
                self.commands.git_pull(path),
                timeout=self.settings.network_timeout,
            )

        return runner.run(
            step.GIT_CLONE,
            f"Cloning '{project.name}' from '{project.url}'",
            self.commands.git_clone(project.url, path),
            timeout=self.settings.network_timeout,
        )

    def build(self, runner: step.StepRunner, project: SourceProject) -> step.StepResult:
        """
        Compiles and installs the working copy of the project.
        """
        return runner.run(
            step.BUILD,
            f"Building and installing '{project.name}'",
            self.commands.make_clean_install(),
            cwd=self.settings.project_dir(project.name),
        )
