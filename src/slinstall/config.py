"""
Module for slinstall configuration options.

NOTE: Do NOT use from imports for the output flags as global variables might not work as you
expect.

Only use:

import slinstall.config

or

import slinstall.config as whatever

-- Paths and timeouts --

Everything a provisioning run touches on disk is described by a single immutable ``Settings``
value. It is created once by the app and handed to each plugin when the plugin is constructed.
"""

import dataclasses
import os

debug_output: bool = False
quiet_output: bool = False
color_output: bool = True

DEFAULT_PATCH_BASE_URL = "https://dwm.suckless.org/patches/"


@dataclasses.dataclass(frozen=True, slots=True)
class Settings:
    """
    Paths, URLs and timeouts used during a provisioning run.

    Parameters:
        ``config_dir``:
            Root directory containing one working copy per source project and the patch cache.

        ``log_file``:
            File that every run appends its output to.

        ``startup_file``:
            Startup file that is regenerated at the end of the run (usually ``~/.xinitrc``).

        ``patch_base_url``:
            URL that remote patch paths are relative to.

        ``network_timeout``:
            Seconds a git clone or pull may take before it is killed.

        ``download_timeout``:
            Seconds to wait for a patch download to respond.

        ``strict_patches``:
            If ``True``, failing to apply a patch aborts the run instead of skipping the patch.

        ``upgrade_system``:
            If ``True``, refresh the package index and upgrade the system before installing.

        ``apply_patches``:
            If ``False``, patches are only downloaded into the cache.
    """

    config_dir: str
    log_file: str
    startup_file: str
    patch_base_url: str = DEFAULT_PATCH_BASE_URL
    network_timeout: int = 300
    download_timeout: int = 30
    strict_patches: bool = False
    upgrade_system: bool = True
    apply_patches: bool = True

    @classmethod
    def for_home(cls, home: str, config_dir: str | None = None, **kwargs) -> "Settings":
        """
        Returns settings using the default layout under the given home directory.
        """
        return cls(
            config_dir=config_dir or os.path.join(home, ".config", ".suckless"),
            log_file=os.path.join(home, "dwm-install.log"),
            startup_file=os.path.join(home, ".xinitrc"),
            **kwargs,
        )

    @property
    def patches_dir(self) -> str:
        return os.path.join(self.config_dir, "patches")

    @property
    def lock_file(self) -> str:
        return os.path.join(self.config_dir, "slinstall.lock")

    def project_dir(self, project: str) -> str:
        """
        Returns the path of the working copy of the given project.
        """
        return os.path.join(self.config_dir, project)

    def patch_cache_path(self, project: str, patch: str) -> str:
        """
        Returns the path where the named patch for the given project is cached.
        """
        return os.path.join(self.patches_dir, project, f"{patch}.diff")
