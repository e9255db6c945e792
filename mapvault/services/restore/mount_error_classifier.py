"""
Mount Error Classifier.

Decides whether a failed mount is worth retrying with explicit credentials
(transient) or not (permanent), based on the Windows system error number
net.exe reports and, failing that, on the message text.
"""

import logging
from typing import Optional

from ...core.exceptions import MountFailure, PermanentMountFailure, TransientMountFailure
from ...models import MappingRecord, MountResult


class MountErrorClassifier:
    # Credentials cannot fix these
    PERMANENT_ERROR_CODES = {
        53,  # The network path was not found
        67,  # The network name cannot be found
        85,  # The local device name is already in use
        1200,  # The specified device name is invalid
        1203,  # No network provider accepted the given network path
        1222,  # The network is not present or not started
        1231,  # The network location cannot be reached
    }

    # The host refused the user/password that was offered
    CREDENTIAL_REJECTED_CODES = {
        86,  # The specified network password is not correct
        1326,  # The user name or password is incorrect
        1327,  # Account restrictions
        1330,  # The password for this account has expired
        1331,  # This account is currently disabled
        1909,  # The referenced account is currently locked out
    }

    PERMANENT_ERROR_STRINGS = (
        "network path was not found",
        "network name cannot be found",
        "already in use",
        "cannot be reached",
        "device name is invalid",
    )

    def to_failure(self, record: MappingRecord, result: MountResult) -> MountFailure:
        message = summarize_output(result.message) or f"exit code {result.exit_code}"
        if self.is_permanent(result):
            logging.debug(f"Permanent mount failure for {record.remote_path}: {message}")
            return PermanentMountFailure(record.remote_path, message, result.error_code)
        return TransientMountFailure(record.remote_path, message, result.error_code)

    def is_permanent(self, result: MountResult) -> bool:
        if result.error_code is not None:
            return result.error_code in self.PERMANENT_ERROR_CODES
        text = result.message.lower()
        return any(indicator in text for indicator in self.PERMANENT_ERROR_STRINGS)

    def is_credential_rejection(self, error_code: Optional[int]) -> bool:
        return error_code in self.CREDENTIAL_REJECTED_CODES


def summarize_output(message: str) -> str:
    """net.exe output condensed to one line, without the boilerplate help hint."""
    lines = [line.strip() for line in message.splitlines() if line.strip()]
    lines = [line for line in lines if not line.lower().startswith("more help is available")]
    return " ".join(lines)
