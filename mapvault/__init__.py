"""mapvault - backup, restore, test and clear mapped network drives."""

__version__ = "0.3.0"
