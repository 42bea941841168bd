"""Installed-application enumeration from freedesktop .desktop entries."""

from __future__ import annotations

import asyncio
import configparser
import logging
from pathlib import Path

from deskremote.backends.base import Application, CapabilityLister

logger = logging.getLogger(__name__)

DESKTOP_ENTRY_SECTION = "Desktop Entry"


class DesktopEntryLister(CapabilityLister):
    """Lists applications from .desktop files in prioritized search paths.

    Paths are scanned highest priority first, ties in the order given.
    Within one path files are taken in sorted order. The same application
    found in two paths is reported twice.
    """

    name = "apps"

    def __init__(self, search_paths: list[tuple[str | Path, int]]) -> None:
        indexed = list(enumerate(search_paths))
        indexed.sort(key=lambda item: (-item[1][1], item[0]))
        self._paths = [Path(path).expanduser() for _, (path, _priority) in indexed]

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    async def list_applications(self) -> list[Application]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._scan)

    def _scan(self) -> list[Application]:
        apps: list[Application] = []
        for directory in self._paths:
            if not directory.is_dir():
                logger.debug("Skipping missing application directory %s", directory)
                continue
            for entry in sorted(directory.rglob("*.desktop")):
                app = read_desktop_entry(entry)
                if app is not None:
                    apps.append(app)
        logger.info("Enumerated %d applications", len(apps))
        return apps


def read_desktop_entry(path: Path) -> Application | None:
    """Parse one .desktop file, returning None for hidden or broken entries."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f)
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        logger.warning("Ignoring unreadable desktop entry %s: %s", path, e)
        return None

    if not parser.has_section(DESKTOP_ENTRY_SECTION):
        return None
    entry = parser[DESKTOP_ENTRY_SECTION]
    if entry.get("Type", "Application") != "Application":
        return None
    if entry.get("NoDisplay", "false").lower() == "true":
        return None
    if entry.get("Hidden", "false").lower() == "true":
        return None
    name = entry.get("Name", "").strip()
    if not name:
        return None
    return Application(name=name, locator=str(path))
