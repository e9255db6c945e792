from .description_resolver import DescriptionResolver, DescriptionSource
from .drive_discovery import DriveDiscovery

__all__ = ["DescriptionResolver", "DescriptionSource", "DriveDiscovery"]
