"""Checksum fingerprinting.

Classifies an untrusted checksum string by text encoding and, from the
decoded byte length, by digest algorithm:

    hex     [0-9a-fA-F]{2n}           -> n bytes
    base64  [A-Za-z0-9+/]{4k} + pad   -> 3k - len(pad) bytes

Hex is tried first, so strings valid in both alphabets (e.g. all digits)
resolve to hex. Unknown is a normal result, never an error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class ChecksumEncoding(str, Enum):
    """Text encoding of a checksum string."""

    HEX = "hex"
    BASE64 = "base64"
    UNKNOWN = "unknown"


class ChecksumAlgorithm(str, Enum):
    """Digest algorithm inferred from decoded length."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChecksumFingerprint:
    """Derived {encoding, algorithm} classification of a checksum string.

    Attributes:
        encoding: Detected text encoding.
        algorithm: Detected digest algorithm.
    """

    encoding: ChecksumEncoding = ChecksumEncoding.UNKNOWN
    algorithm: ChecksumAlgorithm = ChecksumAlgorithm.UNKNOWN

    def __post_init__(self) -> None:
        if (
            self.encoding is ChecksumEncoding.UNKNOWN
            and self.algorithm is not ChecksumAlgorithm.UNKNOWN
        ):
            raise ValueError(f"algorithm {self.algorithm.value} requires a known encoding")

    @property
    def is_known(self) -> bool:
        """True if both encoding and algorithm were recognized."""
        return (
            self.encoding is not ChecksumEncoding.UNKNOWN
            and self.algorithm is not ChecksumAlgorithm.UNKNOWN
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {
            "encoding": self.encoding.value,
            "algorithm": self.algorithm.value,
        }


UNKNOWN_FINGERPRINT = ChecksumFingerprint()

HEX_PATTERN = re.compile(r"\A(?:[0-9a-fA-F]{2})+\Z")
BASE64_PATTERN = re.compile(
    r"\A"
    r"(?:[A-Za-z0-9+/]{4})*"
    r"(?:[A-Za-z0-9+/]{4}|[A-Za-z0-9+/]{3}=|[A-Za-z0-9+/]{2}==)"
    r"\Z"
)

# Digest size in bytes -> algorithm
DIGEST_SIZES: dict[int, ChecksumAlgorithm] = {
    16: ChecksumAlgorithm.MD5,
    20: ChecksumAlgorithm.SHA1,
    28: ChecksumAlgorithm.SHA224,
    32: ChecksumAlgorithm.SHA256,
    48: ChecksumAlgorithm.SHA384,
    64: ChecksumAlgorithm.SHA512,
}


def detect_encoding(raw: str | None) -> ChecksumEncoding:
    """Detect the text encoding of a checksum string."""
    if not isinstance(raw, str):
        return ChecksumEncoding.UNKNOWN
    if HEX_PATTERN.match(raw):
        return ChecksumEncoding.HEX
    if BASE64_PATTERN.match(raw):
        return ChecksumEncoding.BASE64
    return ChecksumEncoding.UNKNOWN


def decoded_length(raw: str, encoding: ChecksumEncoding) -> int | None:
    """Number of bytes the checksum text decodes to.

    Args:
        raw: Checksum text already matched against `encoding`.
        encoding: Detected encoding.

    Returns:
        Decoded byte length, or None for UNKNOWN encoding.
    """
    if encoding is ChecksumEncoding.HEX:
        return len(raw) // 2
    if encoding is ChecksumEncoding.BASE64:
        padding = len(raw) - len(raw.rstrip("="))
        return len(raw) // 4 * 3 - padding
    return None


def classify_checksum(raw: str | None) -> ChecksumFingerprint:
    """Classify a checksum string by encoding and digest algorithm.

    Args:
        raw: Caller-provided checksum text (untrusted), or None.

    Returns:
        ChecksumFingerprint. Absent or unrecognized input yields
        UNKNOWN_FINGERPRINT; a recognized encoding with an unmapped
        decoded length keeps the encoding with an UNKNOWN algorithm.
    """
    if raw is None:
        return UNKNOWN_FINGERPRINT

    encoding = detect_encoding(raw)
    size = decoded_length(raw, encoding)
    if size is None:
        return UNKNOWN_FINGERPRINT

    algorithm = DIGEST_SIZES.get(size, ChecksumAlgorithm.UNKNOWN)
    return ChecksumFingerprint(encoding=encoding, algorithm=algorithm)
