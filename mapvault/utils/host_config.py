"""
Host-specific configuration management utility.

Handles automatic creation and selection of hostname-specific env files,
so one shared folder can hold the settings of several workstations.
"""

import logging
import shutil
import socket
from pathlib import Path

BASE_SETTINGS_FILE = "mapvault.env"


def get_hostname() -> str:
    """Get the current hostname (without domain)."""
    return socket.gethostname().split(".")[0]


def get_hostname_settings_file() -> str:
    """
    Get the appropriate settings file for this host.

    Logic:
    1. Check if {hostname}-mapvault.env exists
    2. If not, create it by copying mapvault.env (with a header)
    3. If there is no base file either, fall back to mapvault.env

    Returns:
        str: Path to the settings file pydantic-settings should read
    """
    try:
        hostname = get_hostname()
        base_settings = Path(BASE_SETTINGS_FILE)
        host_settings = Path(f"{hostname}-{BASE_SETTINGS_FILE}")

        if host_settings.exists():
            logging.debug(f"Using existing host-specific configuration: {host_settings}")
            return str(host_settings)

        if not base_settings.exists():
            return BASE_SETTINGS_FILE

        shutil.copy2(base_settings, host_settings)
        content = host_settings.read_text(encoding="utf-8")
        host_header = (
            f"# Host-specific configuration for: {hostname}\n"
            f"# This file was auto-generated from {BASE_SETTINGS_FILE}\n"
            "# ==========================================================\n\n"
        )
        host_settings.write_text(host_header + content, encoding="utf-8")
        logging.info(f"Created host-specific configuration: {host_settings}")
        return str(host_settings)

    except OSError as e:
        logging.error(f"Error handling host-specific settings: {e}")
        return BASE_SETTINGS_FILE
