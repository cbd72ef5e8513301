import contextlib
import fcntl
import os

import slinstall.core.error as errors
import slinstall.core.output as output


@contextlib.contextmanager
def run_lock(path: str):
    """
    Holds an exclusive lock on the given file for the duration of the context.

    Raises:
        ``LockHeldError``
            If another process already holds the lock.

        ``OSError``
            If the lock file cannot be created.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    # opened without truncating so a refused run keeps the holder's pid
    with open(path, "a+", encoding="utf-8") as file:
        try:
            fcntl.flock(file, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as error:
            raise errors.LockHeldError(path) from error

        output.print_debug(f"Acquired lock '{path}'.")
        file.seek(0)
        file.truncate()
        file.write(f"{os.getpid()}\n")
        file.flush()
        try:
            yield
        finally:
            fcntl.flock(file, fcntl.LOCK_UN)
            output.print_debug(f"Released lock '{path}'.")
