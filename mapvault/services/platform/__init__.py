"""
Platform layer for drive mapping operations.

Components:
- CommandRunner: async subprocess execution with timeouts
- BaseMounter: abstract interface for mount/unmount/enumeration
- WindowsMounter: net.exe / PowerShell implementation
- PlatformFactory: platform detection and mounter creation
"""

from .base_mounter import BaseMounter
from .command_runner import CommandResult, CommandRunner
from .platform_factory import PlatformFactory

__all__ = [
    "BaseMounter",
    "CommandResult",
    "CommandRunner",
    "PlatformFactory",
]
