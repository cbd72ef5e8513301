import contextlib
import os
import shlex
import shutil
import signal
import subprocess
import typing

import slinstall.core.output as output

TIMEOUT_EXIT_CODE = 124


def as_root(command: list[str]) -> list[str]:
    """
    Returns the command prefixed with ``sudo`` unless this process is already running as root.
    """
    if os.geteuid() == 0:
        return list(command)
    return ["sudo"] + list(command)


def run(
    command: list[str],
    cwd: typing.Optional[str] = None,
    timeout: typing.Optional[float] = None,
    env_overrides: None | dict[str, str] = None,
) -> tuple[int, str]:
    """
    Runs a given command with the given arguments and waits for it to finish.

    If ``cwd`` is set, the command is started in that directory. If ``timeout`` is set and the
    command runs longer than ``timeout`` seconds, the command is killed and the exit code is
    ``124``. A command with a timeout runs in its own process group, and the whole group is
    killed.

    If the given command is empty, returns (0, "").

    Returns the return code of the command and the output (stdout and stderr combined) as a string.
    """
    if not command:
        return 0, ""

    command = list(command)
    command[0] = shutil.which(command[0]) or command[0]

    output.print_debug(f"Running command '{shlex.join(command)}'")
    if cwd:
        output.print_debug(f"Working directory is '{cwd}'.")

    env = None
    if env_overrides:
        env = os.environ.copy()
        env.update(env_overrides)

    try:
        process = subprocess.Popen(
            command,
            cwd=cwd,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            # own process group so a timeout can kill helpers too; sudo needs the terminal
            start_new_session=timeout is not None,
        )
    except OSError as error:
        msg = error.strerror or str(error)
        text_output = f"{command[0]}: {msg}\n"
        code = error.errno if error.errno and error.errno < 128 else 127
        return code, text_output

    try:
        stdout, _ = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        # helpers like git-remote-https hold the output pipe open
        with contextlib.suppress(ProcessLookupError):
            os.killpg(process.pid, signal.SIGKILL)
        stdout, _ = process.communicate()
        text_output = stdout.decode("utf-8", errors="replace")
        return TIMEOUT_EXIT_CODE, f"{text_output}{command[0]}: timed out after {timeout} seconds\n"

    return process.returncode, stdout.decode("utf-8", errors="replace")
