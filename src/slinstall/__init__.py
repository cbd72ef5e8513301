# Re-exports
from slinstall.config import Settings
from slinstall.plugins import Plugin
from slinstall.plugins.apt import PackageGroup
from slinstall.plugins.patches import Patch
from slinstall.plugins.sources import SourceProject
from slinstall.plugins.systemd import Service

__all__ = [
    "Settings",
    "Plugin",
    "PackageGroup",
    "Patch",
    "SourceProject",
    "Service",
]

# ------------------------------------------
# Default profile of the provisioned desktop
# ------------------------------------------
# fmt: off
package_groups: list[PackageGroup] = [
    PackageGroup(
        "core",
        (
            "build-essential", "git", "curl", "wget", "patch",
            "xorg", "xorg-dev", "xinput", "xdotool",
            "dbus-x11", "libusb-0.1-4", "libnotify-bin", "libnotify-dev",
            "network-manager-gnome", "make", "cmake",
            "ninja-build", "pkg-config", "picom",
            "libxcb-util-dev",
        ),
    ),
    PackageGroup(
        "audio",
        ("pavucontrol", "pulsemixer", "pamixer", "pipewire-audio", "pipewire-pulse", "wireplumber"),
    ),
    PackageGroup(
        "utilities",
        (
            "avahi-daemon", "acpi", "acpid", "xfce4-power-manager",
            "flameshot", "qimgv", "xdg-user-dirs-gtk", "fd-find",
        ),
    ),
    PackageGroup("ui", ("rofi", "dunst", "feh", "lxappearance", "network-manager-gnome")),
    PackageGroup(
        "file manager",
        (
            "thunar", "thunar-archive-plugin", "thunar-volman",
            "gvfs-backends", "dialog", "mtools", "smbclient", "cifs-utils", "unzip",
        ),
    ),
    PackageGroup(
        "font",
        (
            "fonts-recommended", "fonts-font-awesome", "fonts-terminus",
            "fonts-dejavu", "fonts-noto-core",
        ),
    ),
    PackageGroup("build", ("make", "cmake", "ninja-build", "curl", "pkg-config")),
    PackageGroup(
        "misc",
        (
            "brightnessctl", "xterm", "libavcodec-extra",
            "firefox-esr", "ntfs-3g", "suckless-tools", "exa",
        ),
    ),
]
# fmt: on

services: list[Service] = [
    Service("NetworkManager", start=True),
    Service("pipewire", user=True, start=True),
    Service("pipewire-pulse", user=True, start=True),
    Service("wireplumber", user=True, start=True),
    Service("avahi-daemon"),
    Service("acpid"),
]

source_projects: list[SourceProject] = [
    SourceProject("st", "https://git.suckless.org/st"),
    SourceProject("dmenu", "https://git.suckless.org/dmenu"),
    SourceProject("dwmblocks-async", "https://github.com/UtkarshVerma/dwmblocks-async"),
    SourceProject(
        "dwm", "https://git.suckless.org/dwm", requires=("st", "dmenu", "dwmblocks-async")
    ),
]

patches: list[Patch] = [
    Patch("systray", "systray/dwm-systray-6.4.diff"),
    Patch("pertag", "pertag/dwm-pertag-6.4.diff"),
    Patch("viewontag", "viewontag/dwm-viewontag-6.4.diff"),
    Patch("fakefullscreen", "fakefullscreen/dwm-fakefullscreen-6.4.diff"),
    Patch("alwayscenter", "alwayscenter/dwm-alwayscenter-6.4.diff"),
    Patch("savefloats", "savefloats/dwm-savefloats-6.4.diff"),
    Patch("swallow", "swallow/dwm-swallow-6.4.diff"),
    Patch("scratchpads", "scratchpads/dwm-scratchpads-6.4.diff"),
    Patch("xresources", "xresources/dwm-xresources-6.4.diff"),
]

startup_programs: list[str] = ["nm-applet", "dwmblocks", "picom --daemon"]
session: str = "dwm"

execution_order: list[str] = [
    "apt",
    "systemd",
    "sources",
    "patches",
    "xinit",
]
