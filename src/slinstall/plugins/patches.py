import dataclasses
import os
import shutil
import tempfile
import typing
import urllib.parse

import requests  # type: ignore

import slinstall.config as config
import slinstall.core.error as errors
import slinstall.core.output as output
import slinstall.core.step as step
import slinstall.plugins as plugins
from slinstall.plugins.sources import SourcesCommands


@dataclasses.dataclass(frozen=True, slots=True)
class Patch:
    """
    A patch for a source project.

    ``remote_path`` is relative to the patch base URL. The patch is cached locally at a path that
    only depends on ``project`` and ``name``.
    """

    name: str
    remote_path: str
    project: str = "dwm"


class PatchesCommands:
    """
    Default commands for the Patches plugin.
    """

    def apply(self, patch_file: str) -> list[str]:
        """
        Running this command applies the unified diff to the working copy in the current working
        directory. One leading path component is stripped.
        """
        return ["patch", "-p1", "--forward", "--batch", "-i", patch_file]

    def check(self, patch_file: str) -> list[str]:
        """
        Running this command reports whether the whole diff applies, without changing any files.
        """
        return ["patch", "-p1", "--forward", "--batch", "--dry-run", "-i", patch_file]


class Patches(plugins.Plugin):
    """
    Plugin that downloads patches into the patch cache and applies them to a working copy.

    A cached patch is never downloaded again. A patch that can't be downloaded aborts the run.
    A patch that doesn't apply cleanly is skipped with a warning and leaves the working copy
    untouched, unless strict patches are enabled.
    When any patch applied, the target project is rebuilt.
    """

    NAME = "patches"

    def __init__(self, settings: config.Settings) -> None:
        super().__init__(settings)
        self.patches: list[Patch] = []
        self.target: typing.Optional[str] = "dwm"
        self.commands = PatchesCommands()
        self.build_commands = SourcesCommands()

        self.downloaded: list[str] = []
        self.applied: list[str] = []
        self.skipped: list[str] = []

    def available(self) -> bool:
        if not self.settings.apply_patches:
            return True
        return shutil.which("patch") is not None

    def apply(self, dry_run: bool = False) -> bool:
        runner = self.runner(dry_run)
        self.downloaded, self.applied, self.skipped = [], [], []

        try:
            output.print_summary("Downloading patches.")
            for patch in self.patches:
                if self.download(patch, dry_run=dry_run):
                    self.downloaded.append(patch.name)
            output.print_list("Downloaded patches:", self.downloaded)

            if self.settings.apply_patches and self.target is not None:
                self.apply_to_target(runner, self.target)
        except errors.PatchDownloadError as error:
            output.print_error(str(error))
            output.print_traceback()
            return False
        except errors.StepFailedError as error:
            output.print_error(f"Patching '{self.target}' failed: {error.label}.")
            return False
        except OSError as error:
            output.print_error(f"Failed to write to the patch cache: {error.strerror or error}.")
            output.print_traceback()
            return False
        return True

    def url_for(self, patch: Patch) -> str:
        """
        Returns the URL the patch is downloaded from.
        """
        base = self.settings.patch_base_url
        if not base.endswith("/"):
            base += "/"
        return urllib.parse.urljoin(base, patch.remote_path.lstrip("/"))

    def download(self, patch: Patch, dry_run: bool = False) -> bool:
        """
        Downloads the patch into the patch cache unless it's already cached.

        Returns ``True`` if the patch was downloaded.

        Raises:
            ``PatchDownloadError``
                If the request fails or the server responds with an error.

            ``OSError``
                If writing the cache file fails.
        """
        path = self.settings.patch_cache_path(patch.project, patch.name)

        if os.path.exists(path):
            output.print_info(f"Patch '{patch.name}' is already cached at '{path}'.")
            return False

        url = self.url_for(patch)
        output.print_info(f"Downloading patch '{patch.name}' from '{url}'.")
        if dry_run:
            return True

        try:
            response = requests.get(url, timeout=self.settings.download_timeout)
            response.raise_for_status()
        except requests.RequestException as error:
            raise errors.PatchDownloadError(patch.name, url, str(error)) from error

        os.makedirs(os.path.dirname(path), exist_ok=True)
        tmp_dir = self.scratch_dir or os.path.dirname(path)

        with tempfile.NamedTemporaryFile("wb", dir=tmp_dir, suffix=".diff", delete=False) as tmp:
            tmp.write(response.content)

        try:
            shutil.move(tmp.name, path)
        except OSError:
            os.remove(tmp.name)
            raise

        output.print_debug(f"Patch '{patch.name}' saved to '{path}'.")
        return True

    def apply_to_target(self, runner: step.StepRunner, target: str):
        """
        Applies the patches of the target project to its working copy in order and rebuilds the
        project if any patch applied.

        Raises:
            ``StepFailedError``
                If a patch fails with strict patches enabled or rebuilding fails.
        """
        target_dir = self.settings.project_dir(target)
        patches = [p for p in self.patches if p.project == target]

        if not patches:
            return

        if not runner.dry_run and not os.path.isdir(target_dir):
            output.print_warning(
                f"Working copy of '{target}' doesn't exist at '{target_dir}'. Not applying patches."
            )
            return

        output.print_summary(f"Applying patches to '{target}'.")
        for patch in patches:
            patch_file = self.settings.patch_cache_path(patch.project, patch.name)

            # patch applies matching hunks even when others fail, so check the whole diff first
            result = runner.run(
                step.PATCH_APPLY,
                f"Checking patch '{patch.name}'",
                self.commands.check(patch_file),
                cwd=target_dir,
            ).raise_if_fatal()

            if result.ok:
                result = runner.run(
                    step.PATCH_APPLY,
                    f"Applying patch '{patch.name}'",
                    self.commands.apply(patch_file),
                    cwd=target_dir,
                ).raise_if_fatal()

            if result.ok:
                self.applied.append(patch.name)
            else:
                output.print_warning(
                    f"Skipped patch '{patch.name}'. It may not match this version of '{target}'."
                )
                self.skipped.append(patch.name)

        output.print_list("Applied patches:", self.applied)
        output.print_list("Skipped patches:", self.skipped)

        if self.applied:
            runner.run(
                step.BUILD,
                f"Rebuilding '{target}' with patches",
                self.build_commands.make_clean_install(),
                cwd=target_dir,
            ).raise_if_fatal()
