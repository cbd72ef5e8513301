import slinstall.config as config
import slinstall.core.fs as fs
import slinstall.core.output as output
import slinstall.plugins as plugins


def render_startup_file(programs: list[str], session: str) -> str:
    """
    Returns the contents of a startup file that starts ``programs`` in the background and then
    replaces itself with ``session``.
    """
    lines = ["#!/bin/sh", f"# ~/.xinitrc generated by slinstall: {session} autostart", ""]
    for program in programs:
        lines.append(f"{program} &")
    lines.append("")
    lines.append(f"exec {session}")
    return "\n".join(lines) + "\n"


class Xinit(plugins.Plugin):
    """
    Plugin that regenerates the X startup file. An existing startup file is backed up first.
    """

    NAME = "xinit"

    def __init__(self, settings: config.Settings) -> None:
        super().__init__(settings)
        self.programs: list[str] = []
        self.session: str = "dwm"

    def apply(self, dry_run: bool = False) -> bool:
        target = self.settings.startup_file
        file = fs.File(
            content=render_startup_file(self.programs, self.session),
            permissions=0o755,
            backup=True,
        )

        output.print_summary(f"Writing '{target}'.")
        output.print_list("Started in the background:", self.programs, level=output.INFO)

        if dry_run:
            return True

        try:
            backup = file.write_to(target)
        except OSError as error:
            output.print_error(f"Failed to write '{target}': {error.strerror or error}.")
            output.print_traceback()
            return False

        if backup:
            output.print_info(f"Previous startup file saved to '{backup}'.")
        return True
