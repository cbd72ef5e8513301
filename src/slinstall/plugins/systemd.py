import dataclasses
import shutil

import slinstall.config as config
import slinstall.core.command as command
import slinstall.core.output as output
import slinstall.core.step as step
import slinstall.plugins as plugins


@dataclasses.dataclass(frozen=True, slots=True)
class Service:
    """
    A systemd unit that should be enabled.

    ``user`` units are enabled for the user running slinstall. ``start`` also starts the unit
    immediately.
    """

    unit: str
    user: bool = False
    start: bool = False


class SystemdCommands:
    """
    Default commands for the Systemd plugin.
    """

    def enable_unit(self, unit: str, start: bool) -> list[str]:
        """
        Running this command enables the given systemd unit.
        """
        now = ["--now"] if start else []
        return command.as_root(["systemctl", "enable"] + now + [unit])

    def enable_user_unit(self, unit: str, start: bool) -> list[str]:
        """
        Running this command enables the given systemd unit for the current user.
        """
        now = ["--now"] if start else []
        return ["systemctl", "--user", "enable"] + now + [unit]


class Systemd(plugins.Plugin):
    """
    Plugin that enables services. Enabling is best effort: a user service manager or a system bus
    may be missing in minimal environments, which must not block provisioning.
    """

    NAME = "systemd"

    def __init__(self, settings: config.Settings) -> None:
        super().__init__(settings)
        self.services: list[Service] = []
        self.commands = SystemdCommands()

    def available(self) -> bool:
        return shutil.which("systemctl") is not None

    def apply(self, dry_run: bool = False) -> bool:
        runner = self.runner(dry_run)

        output.print_list("Enabling systemd units:", [s.unit for s in self.services if not s.user])
        output.print_list("Enabling systemd user units:", [s.unit for s in self.services if s.user])

        failed = []
        for service in self.services:
            if not self.enable(runner, service).ok:
                failed.append(service.unit)

        if failed:
            output.print_warning(f"Some services could not be enabled: {', '.join(failed)}.")
        return True

    def enable(self, runner: step.StepRunner, service: Service) -> step.StepResult:
        """
        Enables a single service. Never raises on failure.
        """
        if service.user:
            cmd = self.commands.enable_user_unit(service.unit, service.start)
            label = f"Enabling user unit '{service.unit}'"
        else:
            cmd = self.commands.enable_unit(service.unit, service.start)
            label = f"Enabling unit '{service.unit}'"
        return runner.run(step.SERVICE_ENABLE, label, cmd)
