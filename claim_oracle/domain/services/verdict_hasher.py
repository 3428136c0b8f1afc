"""Deterministic verdict fingerprints.

The digest is recomputed by the ledger side and by the scheduled price-claim
workflow, so the byte layout below is fixed. Layout version 1::

    utf8(claim_id) || utf8(verdict) || uint256_be(confidence) || uint256_be(timestamp)

Strings are tightly packed (no length prefix, no padding); integers are
32-byte big-endian. Confidence is rounded half-up before encoding. The
concatenation is hashed with Keccak-256, which makes the digest equal to
Solidity's ``keccak256(abi.encodePacked(string, string, uint256, uint256))``.
"""

from typing import Union

from web3 import Web3

from ..models.verification import Verdict, round_half_up

VERDICT_HASH_LAYOUT_VERSION = 1
UINT256_BYTES = 32
_UINT256_MAX = 2 ** 256 - 1


def _uint256(value: int, field: str) -> bytes:
    if value < 0 or value > _UINT256_MAX:
        raise ValueError(f"{field} does not fit in uint256: {value}")
    return value.to_bytes(UINT256_BYTES, 'big')


def pack_verdict(
    claim_id: str,
    verdict: Union[Verdict, str],
    confidence: float,
    timestamp: int,
) -> bytes:
    """Pack the hash inputs tightly, matching abi.encodePacked."""
    label = verdict.value if isinstance(verdict, Verdict) else str(verdict)
    return b''.join([
        claim_id.encode('utf-8'),
        label.encode('utf-8'),
        _uint256(round_half_up(confidence), "confidence"),
        _uint256(int(timestamp), "timestamp"),
    ])


def compute_verdict_hash(
    claim_id: str,
    verdict: Union[Verdict, str],
    confidence: float,
    timestamp: int,
) -> bytes:
    """Compute the 32-byte Keccak-256 verdict digest.

    Args:
        claim_id: Identity of the claim (source post id)
        verdict: TRUE, FALSE or UNVERIFIABLE
        confidence: Confidence score; fractional values are rounded half-up
        timestamp: Unix timestamp in seconds

    Returns:
        bytes32 digest
    """
    return bytes(Web3.keccak(pack_verdict(claim_id, verdict, confidence, timestamp)))


def verdict_hash_hex(
    claim_id: str,
    verdict: Union[Verdict, str],
    confidence: float,
    timestamp: int,
) -> str:
    """Same digest as :func:`compute_verdict_hash`, as a 0x-prefixed hex string."""
    return "0x" + compute_verdict_hash(claim_id, verdict, confidence, timestamp).hex()
