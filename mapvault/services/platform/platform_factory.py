"""Platform Factory - platform detection and mounter creation."""

import logging
import platform

from ...core.exceptions import UnsupportedPlatformError
from .base_mounter import BaseMounter
from .command_runner import CommandRunner


class PlatformFactory:
    """Factory for creating platform-specific mounter implementations."""

    def detect_platform(self) -> str:
        """Detect current platform. Returns: windows, macos or linux."""
        system = platform.system().lower()

        if system == "windows":
            return "windows"
        elif system == "darwin":
            return "macos"
        elif system == "linux":
            return "linux"
        else:
            raise UnsupportedPlatformError(f"Platform {system} not supported for drive mapping")

    def create_mounter(self, runner: CommandRunner) -> BaseMounter:
        """Create platform-specific mounter instance."""
        platform_name = self.detect_platform()

        if platform_name == "windows":
            from .windows_mounter import WindowsMounter

            return WindowsMounter(runner)

        logging.debug(f"No drive mapping support on {platform_name}")
        raise UnsupportedPlatformError(
            f"Drive letter mappings only exist on Windows, not on {platform_name}"
        )
