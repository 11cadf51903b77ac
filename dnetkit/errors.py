"""Enclave status codes and the messages reported for them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class EnclaveStatus(Enum):
    """Status of an attempt to create or use an enclave."""

    SUCCESS = auto()
    UNEXPECTED = auto()
    INVALID_PARAMETER = auto()
    OUT_OF_MEMORY = auto()
    ENCLAVE_LOST = auto()
    INVALID_ENCLAVE = auto()
    INVALID_ENCLAVE_ID = auto()
    INVALID_SIGNATURE = auto()
    OUT_OF_EPC = auto()
    NO_DEVICE = auto()
    MEMORY_MAP_CONFLICT = auto()
    INVALID_METADATA = auto()
    DEVICE_BUSY = auto()
    INVALID_VERSION = auto()
    INVALID_ATTRIBUTE = auto()
    ENCLAVE_FILE_ACCESS = auto()


@dataclass(frozen=True)
class _Entry:
    message: str
    suggestion: Optional[str] = None


_ERRORS = {
    EnclaveStatus.UNEXPECTED: _Entry("Unexpected error occurred."),
    EnclaveStatus.INVALID_PARAMETER: _Entry("Invalid parameter."),
    EnclaveStatus.OUT_OF_MEMORY: _Entry("Out of memory."),
    EnclaveStatus.ENCLAVE_LOST: _Entry(
        "Power transition occurred.",
        'Please refer to the sample "PowerTransition" for details.',
    ),
    EnclaveStatus.INVALID_ENCLAVE: _Entry("Invalid enclave image."),
    EnclaveStatus.INVALID_ENCLAVE_ID: _Entry("Invalid enclave identification."),
    EnclaveStatus.INVALID_SIGNATURE: _Entry("Invalid enclave signature."),
    EnclaveStatus.OUT_OF_EPC: _Entry("Out of EPC memory."),
    EnclaveStatus.NO_DEVICE: _Entry(
        "Invalid SGX device.",
        "Please make sure SGX module is enabled in the BIOS, and install SGX driver afterwards.",
    ),
    EnclaveStatus.MEMORY_MAP_CONFLICT: _Entry("Memory map conflicted."),
    EnclaveStatus.INVALID_METADATA: _Entry("Invalid enclave metadata."),
    EnclaveStatus.DEVICE_BUSY: _Entry("SGX device was busy."),
    EnclaveStatus.INVALID_VERSION: _Entry("Enclave version was invalid."),
    EnclaveStatus.INVALID_ATTRIBUTE: _Entry("Enclave was not authorized."),
    EnclaveStatus.ENCLAVE_FILE_ACCESS: _Entry("Can't open enclave file."),
}


def error_message(status) -> str:
    """Text reported for a failed status: an optional Info line, then an Error line."""
    entry = _ERRORS.get(status)
    if entry is None:
        return "Error: Unexpected error occurred."
    lines = []
    if entry.suggestion is not None:
        lines.append(f"Info: {entry.suggestion}")
    lines.append(f"Error: {entry.message}")
    return "\n".join(lines)


class EnclaveError(RuntimeError):
    """Raised when an enclave operation fails."""

    def __init__(self, status):
        self.status = status
        super().__init__(error_message(status))