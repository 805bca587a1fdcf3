"""Checksum fingerprinting for release artifacts."""

from releasecore.checksums.classifier import (
    DIGEST_SIZES,
    UNKNOWN_FINGERPRINT,
    ChecksumAlgorithm,
    ChecksumEncoding,
    ChecksumFingerprint,
    classify_checksum,
    decoded_length,
    detect_encoding,
)

__all__ = [
    "DIGEST_SIZES",
    "UNKNOWN_FINGERPRINT",
    "ChecksumAlgorithm",
    "ChecksumEncoding",
    "ChecksumFingerprint",
    "classify_checksum",
    "decoded_length",
    "detect_encoding",
]
