import os
import shutil
import typing


class File:
    """
    Declarative file specification describing a text file that should be written to a target path.

    Writing always replaces the whole file. If ``backup`` is set and the target already exists, it
    is first copied to a sibling with the ``.bak`` suffix, replacing any previous backup.

    Missing parent directories are created recursively.

    Parameters:
        ``content``:
            In-memory file contents to write.

        ``encoding``:
            Text encoding used when writing the file.

        ``permissions``:
            File mode applied to the target file (e.g. ``0o644``).

        ``backup``:
            If ``True``, keep a copy of an existing target before overwriting it.
    """

    BACKUP_SUFFIX = ".bak"

    def __init__(
        self,
        content: str,
        encoding: str = "utf-8",
        permissions: int = 0o644,
        backup: bool = False,
    ):
        self.content = content
        self.encoding = encoding
        self.permissions = permissions
        self.backup = backup

    def write_to(self, target: str) -> typing.Optional[str]:
        """
        Writes the contents of this file to the target file.

        Returns:
            The path of the created backup, or ``None`` if no backup was made.

        Raises:
            OSError
                If directory creation, copying, file I/O or permission changes fail.

            UnicodeEncodeError
                If the content cannot be encoded using ``encoding``.
        """
        target_directory = os.path.dirname(target)
        if target_directory:
            os.makedirs(target_directory, exist_ok=True)

        backup_path = None
        if self.backup and os.path.exists(target):
            backup_path = f"{target}{self.BACKUP_SUFFIX}"
            shutil.copy2(target, backup_path)

        with open(target, "wt", encoding=self.encoding) as file:
            file.write(self.content)

        os.chmod(target, self.permissions)
        return backup_path
