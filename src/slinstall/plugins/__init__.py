import typing

import slinstall.config as config
import slinstall.core.step as step


class Plugin:
    """
    A Plugin performs one stage of provisioning a system.

    NAME:
        Canonical plugin name. Used in the execution order and with ``--only`` and ``--skip``.
    """

    NAME: str = ""

    def __init__(self, settings: config.Settings) -> None:
        self.settings = settings
        self.scratch_dir: typing.Optional[str] = None

    def available(self) -> bool:
        """
        Checks if this plugin can be enabled.

        For example, this could check if a required command is available.

        Returns true if this plugin can be enabled.
        """
        return True

    def prepare(self, scratch_dir: str):
        """
        Called before ``apply`` with a scratch directory that is removed when the run ends.
        """
        self.scratch_dir = scratch_dir

    def apply(self, dry_run: bool = False) -> bool:
        """
        Performs the stage managed by this plugin.

        Set ``dry_run`` to only print changes applying this plugin would cause.

        This method must not raise exceptions. Instead it should return False to indicate a
        failure. The method should handle it's exceptions and print them to the user.

        Returns ``True`` when applying was successful, ``False`` when it failed.
        """
        return True

    def runner(self, dry_run: bool = False) -> step.StepRunner:
        """
        Returns a step runner using the tolerance table of the current settings.
        """
        return step.StepRunner(step.tolerances(self.settings.strict_patches), dry_run=dry_run)
