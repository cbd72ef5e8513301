import dataclasses
import shutil

import slinstall.config as config
import slinstall.core.command as command
import slinstall.core.error as errors
import slinstall.core.output as output
import slinstall.core.step as step
import slinstall.plugins as plugins


@dataclasses.dataclass(frozen=True, slots=True)
class PackageGroup:
    """
    Named, ordered set of package names. The name is only used in messages.
    """

    name: str
    packages: tuple[str, ...]


class AptCommands:
    """
    Default commands for the Apt plugin.
    """

    def update(self) -> list[str]:
        """
        Running this command refreshes the package index.
        """
        return command.as_root(["apt", "update"])

    def full_upgrade(self) -> list[str]:
        """
        Running this command upgrades all installed packages.
        """
        return command.as_root(["apt", "full-upgrade", "-y"])

    def install(self, pkgs: tuple[str, ...]) -> list[str]:
        """
        Running this command installs the given packages. Already installed packages are kept.
        """
        return command.as_root(["apt", "install", "-y"] + list(pkgs))


class Apt(plugins.Plugin):
    """
    Plugin that installs package groups with apt. Each group is installed with a single apt
    invocation, in order. A failing group aborts the run.
    """

    NAME = "apt"

    def __init__(self, settings: config.Settings) -> None:
        super().__init__(settings)
        self.groups: list[PackageGroup] = []
        self.commands = AptCommands()

    def available(self) -> bool:
        return shutil.which("apt") is not None

    def apply(self, dry_run: bool = False) -> bool:
        runner = self.runner(dry_run)

        try:
            if self.settings.upgrade_system:
                output.print_summary("Updating apt and upgrading the system.")
                runner.run(
                    step.APT_UPDATE, "Refreshing the package index", self.commands.update()
                ).raise_if_fatal()
                runner.run(
                    step.APT_UPGRADE, "Upgrading installed packages", self.commands.full_upgrade()
                ).raise_if_fatal()

            for group in self.groups:
                self.install_group(runner, group)
        except errors.StepFailedError as error:
            output.print_error(f"Failed to install packages: {error.label}.")
            return False
        return True

    def install_group(self, runner: step.StepRunner, group: PackageGroup) -> step.StepResult:
        """
        Installs all packages of the group with one apt invocation.

        Raises:
            ``StepFailedError``
                If apt fails.
        """
        if not group.packages:
            output.print_debug(f"Package group '{group.name}' is empty.")
            return step.StepResult(step.APT_INSTALL, group.name, step.Outcome.SUCCESS)

        output.print_list(f"Installing {group.name} packages:", list(group.packages))
        return runner.run(
            step.APT_INSTALL,
            f"Installing the {group.name} package group",
            self.commands.install(group.packages),
        ).raise_if_fatal()
