import argparse
import contextlib
import os
import sys
import tempfile

import slinstall
import slinstall.config as conf
import slinstall.core.error as errors
import slinstall.core.lock as lock
import slinstall.core.output as output
import slinstall.plugins as plugins
from slinstall.plugins.apt import Apt
from slinstall.plugins.patches import Patches
from slinstall.plugins.sources import Sources
from slinstall.plugins.systemd import Systemd
from slinstall.plugins.xinit import Xinit

# Steps that may be skipped when the tools they need are missing.
_OPTIONAL_STEPS = {"systemd"}


def main():
    """
    Main entry for the CLI app
    """

    parser = argparse.ArgumentParser(
        prog="slinstall",
        description="Provision a minimal Debian desktop with dwm and other suckless tools",
    )

    parser.add_argument(
        "--dry-run",
        "--print",
        action="store_true",
        default=False,
        help="print what would happen as a result of running slinstall",
    )
    parser.add_argument("--debug", action="store_true", default=False, help="show debug output")
    parser.add_argument(
        "--quiet", action="store_true", default=False, help="only show summaries and errors"
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="don't print messages with color",
    )
    parser.add_argument("--skip", nargs="*", type=str, help="skip the following execution steps")
    parser.add_argument(
        "--only", nargs="*", type=str, help="run only the following execution steps"
    )
    parser.add_argument(
        "--config-dir",
        action="store",
        help="directory for source working copies and the patch cache",
    )
    parser.add_argument(
        "--strict-patches",
        action="store_true",
        default=False,
        help="abort when a patch fails to apply instead of skipping it",
    )
    parser.add_argument(
        "--no-upgrade",
        action="store_true",
        default=False,
        help="don't refresh the package index and upgrade the system before installing",
    )
    parser.add_argument(
        "--no-apply",
        action="store_true",
        default=False,
        help="only download patches, don't apply them",
    )

    args = parser.parse_args()

    conf.debug_output = args.debug
    conf.quiet_output = args.quiet

    if args.no_color:
        conf.color_output = False
    else:
        conf.color_output = output.has_ansi_support()

    if os.geteuid() == 0 and os.environ.get("SUDO_USER"):
        output.print_error("Running through sudo. Please run slinstall as your desktop user.")
        output.print_info("slinstall calls sudo itself for the steps that need it.")
        sys.exit(1)

    settings = conf.Settings.for_home(
        os.path.expanduser("~"),
        config_dir=args.config_dir,
        strict_patches=args.strict_patches,
        upgrade_system=not args.no_upgrade,
        apply_patches=not args.no_apply,
    )

    if not execute(settings, args):
        sys.exit(1)


def execute(settings: conf.Settings, args: argparse.Namespace) -> bool:
    """
    Runs slinstall inside the resources a run needs: the log file, the run lock and a scratch
    directory. All of them are released however the run ends.

    Returns ``True`` if executed successfully. Otherwise ``False``.
    """
    try:
        with contextlib.ExitStack() as stack:
            if not args.dry_run:
                output.open_log(settings.log_file)
                stack.callback(output.close_log)
                stack.enter_context(lock.run_lock(settings.lock_file))

            scratch_dir = stack.enter_context(tempfile.TemporaryDirectory(prefix="slinstall-"))
            return run_slinstall(settings, args, scratch_dir)
    except errors.LockHeldError as error:
        output.print_error(str(error))
    except OSError as error:
        output.print_error(f"Failed to prepare the run: {error.strerror or str(error)}.")
        output.print_traceback()
    except Exception as error:
        output.print_error(f"Unexpected error while running slinstall: {error}")
        output.print_traceback()
    return False


def build_plugins(settings: conf.Settings) -> dict[str, plugins.Plugin]:
    """
    Returns the plugins configured with the default profile.
    """
    apt = Apt(settings)
    apt.groups = list(slinstall.package_groups)

    systemd = Systemd(settings)
    systemd.services = list(slinstall.services)

    sources = Sources(settings)
    sources.projects = list(slinstall.source_projects)

    patches = Patches(settings)
    patches.patches = list(slinstall.patches)

    xinit = Xinit(settings)
    xinit.programs = list(slinstall.startup_programs)
    xinit.session = slinstall.session

    return {p.NAME: p for p in (apt, systemd, sources, patches, xinit)}


def run_slinstall(
    settings: conf.Settings,
    args: argparse.Namespace,
    scratch_dir: str,
    available_plugins: dict[str, plugins.Plugin] | None = None,
) -> bool:
    """
    Runs the execution steps in order and stops at the first step that fails.

    Returns ``True`` if executed successfully. Otherwise ``False``.
    """
    if available_plugins is None:
        available_plugins = build_plugins(settings)

    for step in _determine_execution_order(args):
        plugin = available_plugins.get(step, None)
        if plugin is None:
            output.print_warning(
                f"Step '{step}' configured in execution_order, but no such plugin exists."
            )
            continue

        if not plugin.available():
            if step in _OPTIONAL_STEPS or args.dry_run:
                output.print_warning(f"Skipping step '{step}': required tools are missing.")
                continue
            output.print_error(f"Cannot run step '{step}': required tools are missing.")
            return False

        output.print_info(f"Running step '{step}'.")
        plugin.prepare(scratch_dir)
        if not plugin.apply(dry_run=args.dry_run):
            output.print_error(f"Step '{step}' failed. Aborting.")
            return False

    output.print_summary("Installation finished.")
    return True


def _determine_execution_order(args: argparse.Namespace) -> list[str]:
    execution_order = []

    if args.only:
        output.print_debug("Argument '--only' is set. Pruning execution steps.")
        for step in slinstall.execution_order:
            if step in args.only:
                output.print_debug(f"Adding {step} to execution order.")
                execution_order.append(step)
    else:
        execution_order = list(slinstall.execution_order)

    for skip in args.skip or []:
        if skip in execution_order:
            output.print_debug(f"Skipping step {skip}.")
            execution_order.remove(skip)

    output.print_debug(f"Execution order is: {', '.join(execution_order)}.")
    return execution_order
