import datetime
import os
import re
import shutil
import sys
import traceback
import typing

import slinstall.config as config

# ─────────────────────────────
# Visible (non-ANSI) constants
# ─────────────────────────────

_TAG_TEXT = "[SLINSTALL]"
_SPACING = "    "
_CONTINUATION_PREFIX_TEXT = f"{_TAG_TEXT}{_SPACING} "

INFO = 1
SUMMARY = 2

_ANSI_RE = re.compile(r"\033\[[0-9;]*m")

_log_file: typing.Optional[typing.TextIO] = None


# ─────────────────────────────
# Log file
# ─────────────────────────────


def open_log(path: str):
    """
    Starts mirroring every printed message to the given file. The file is appended to.

    Raises:
        OSError
            If the file cannot be opened.
    """
    global _log_file
    close_log()
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    _log_file = open(path, "at", encoding="utf-8")
    _log_file.write(f"==> slinstall run started at {datetime.datetime.now().isoformat()}\n")
    _log_file.flush()


def close_log():
    """
    Stops mirroring messages to the log file.
    """
    global _log_file
    if _log_file is not None:
        _log_file.close()
        _log_file = None


def _emit(line: str, stream: typing.Optional[typing.TextIO] = None):
    print(line, file=stream or sys.stdout)
    if _log_file is not None:
        _log_file.write(_ANSI_RE.sub("", line) + "\n")
        _log_file.flush()


# ─────────────────────────────
# Color / formatting helpers
# ─────────────────────────────


def has_ansi_support() -> bool:
    """
    Returns True if the running terminal supports ANSI colors or if colors should be enabled.
    """
    if os.environ.get("NO_COLOR") is not None:
        return False
    if os.environ.get("FORCE_COLOR") is not None:
        return True

    if not sys.stdout.isatty():
        return False

    term = os.environ.get("TERM", "")
    return term not in ("", "dumb")


def _apply_color(code: str, text: str) -> str:
    if not config.color_output:
        return text
    return f"{code}{text}\033[m"


def _tag() -> str:
    if not config.color_output:
        return _TAG_TEXT
    return "[\033[1;34mSLINSTALL\033[m]"


def _continuation_prefix() -> str:
    return f"{_tag()}{_SPACING} "


def _red(text: str) -> str:
    return _apply_color("\033[91m", text)


def _yellow(text: str) -> str:
    return _apply_color("\033[93m", text)


def _cyan(text: str) -> str:
    return _apply_color("\033[96m", text)


def _gray(text: str) -> str:
    return _apply_color("\033[90m", text)


# ─────────────────────────────
# Printing helpers
# ─────────────────────────────


def print_continuation(msg: str, level: int = SUMMARY):
    """
    Prints a message without a prefix.
    """
    if level == SUMMARY or config.debug_output or not config.quiet_output:
        _emit(f"{_continuation_prefix()}{msg}")


def print_error(error_msg: str):
    """
    Prints an error message to the user. Errors go to stderr.
    """
    _emit(f"{_tag()} {_red('ERROR')}: {error_msg}", sys.stderr)


def print_warning(msg: str):
    """
    Prints a warning to the user.
    """
    _emit(f"{_tag()} {_yellow('WARNING')}: {msg}")


def print_summary(msg: str):
    """
    Prints a summary message to the user.
    """
    _emit(f"{_tag()} {_cyan('SUMMARY')}: {msg}")


def print_info(msg: str):
    """
    Prints a detailed message to the user if verbose output is not disabled.
    """
    if config.debug_output or not config.quiet_output:
        _emit(f"{_tag()} INFO: {msg}")


def print_debug(msg: str):
    """
    Prints a detailed message to the user if debug messages are enabled.
    """
    if config.debug_output:
        _emit(f"{_tag()} {_gray('DEBUG')}: {msg}")


def print_command_output(text: str):
    """
    Prints the captured output of a command. Only shown with debug output but always logged.
    """
    for line in text.rstrip("\n").splitlines():
        if config.debug_output:
            _emit(f"{_continuation_prefix()}{_gray(line)}")
        elif _log_file is not None:
            _log_file.write(f"{_CONTINUATION_PREFIX_TEXT}{_ANSI_RE.sub('', line)}\n")
    if _log_file is not None:
        _log_file.flush()


def print_traceback():
    """
    Prints the traceback of the exception currently being handled if debug output is enabled.
    """
    if config.debug_output:
        for line in traceback.format_exc().rstrip("\n").splitlines():
            _emit(f"{_continuation_prefix()}{_gray(line)}", sys.stderr)


# ─────────────────────────────
# List printing
# ─────────────────────────────


def print_list(
    msg: str,
    list_to_print: list[str],
    elements_per_line: typing.Optional[int] = None,
    max_line_width: typing.Optional[int] = None,
    limit_to_term_size: bool = True,
    level: int = SUMMARY,
):
    """
    Prints a summary message to the user along with a list of elements.

    If the list is empty, prints nothing.
    """
    if len(list_to_print) == 0:
        return

    list_to_print = list_to_print.copy()

    if level == SUMMARY:
        print_summary(msg)
    elif level == INFO:
        print_info(msg)

    if elements_per_line is None:
        elements_per_line = len(list_to_print)

    if max_line_width is None:
        max_line_width = 2**32

    if limit_to_term_size:
        visible_prefix_len = len(_CONTINUATION_PREFIX_TEXT)
        max_line_width = shutil.get_terminal_size().columns - visible_prefix_len

    lines = [list_to_print.pop(0)]
    index = 0
    elements_in_current_line = 1

    while list_to_print:
        next_element = list_to_print.pop(0)

        can_fit_elements = elements_in_current_line + 1 <= elements_per_line
        can_fit_text = len(lines[index]) + len(next_element) <= max_line_width

        if can_fit_text and can_fit_elements:
            lines[index] += f" {next_element}"
            elements_in_current_line += 1
        else:
            lines.append(next_element)
            index += 1
            elements_in_current_line = 1

    for line in lines:
        print_continuation(line, level=level)
