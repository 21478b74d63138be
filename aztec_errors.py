"""
Aztec decoding errors.

ChecksumError marks codewords that error correction could not recover.
FormatError marks corrected data that violates the bit-stream rules.
"""

from enum import Enum


class ErrorType(Enum):
    FORMAT = "format"
    CHECKSUM = "checksum"


class AztecDecodeError(Exception):
    """Base class for errors that end a decode."""

    error_type = ErrorType.FORMAT

    def __init__(self, message=""):
        super().__init__(message)
        self.message = message

    def __str__(self):
        if self.message:
            return f"{self.error_type.name.title()}Error: {self.message}"
        return f"{self.error_type.name.title()}Error"


class ChecksumError(AztecDecodeError):
    """Reed-Solomon correction could not recover the codewords."""

    error_type = ErrorType.CHECKSUM


class FormatError(AztecDecodeError):
    """Corrected data is not a well formed Aztec bit stream."""

    error_type = ErrorType.FORMAT
