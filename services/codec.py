# /services/codec.py
"""
Opaque amount codec.

Amounts are stored as "FHE-" followed by the base64 of their decimal digits.
This is a placeholder scheme with no confidentiality; a real homomorphic
scheme can be substituted behind the same encode/decode pair.
"""
import base64
import binascii
import re
from typing import Protocol

from errors import CodecError

FHE_PREFIX = "FHE-"


class AmountCodec(Protocol):
    def encode(self, amount: int) -> str: ...

    def decode(self, ciphertext: str) -> int: ...


# plain ASCII digits, optionally with an all-zero fraction ("500.0")
_AMOUNT_PATTERN = re.compile(r"([0-9]+)(?:\.0*)?")


def _parse_amount(text: str) -> int:
    text = text.strip()
    match = _AMOUNT_PATTERN.fullmatch(text)
    if match is None:
        raise CodecError(f"Not a non-negative integral amount: {text!r}")
    return int(match.group(1))


class TaggedBase64Codec:
    """Codec producing `FHE-<base64>` ciphertexts; also reads untagged legacy values."""

    def __init__(self, prefix: str = FHE_PREFIX):
        self.prefix = prefix

    def encode(self, amount: int) -> str:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise CodecError(f"Only non-negative integers can be encoded, got {amount!r}")
        payload = base64.b64encode(str(amount).encode("ascii")).decode("ascii")
        return f"{self.prefix}{payload}"

    def decode(self, ciphertext: str) -> int:
        if not isinstance(ciphertext, str):
            raise CodecError(f"Ciphertext must be a string, got {type(ciphertext).__name__}")
        if not ciphertext.startswith(self.prefix):
            return _parse_amount(ciphertext)
        try:
            text = base64.b64decode(ciphertext[len(self.prefix):], validate=True).decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise CodecError(f"Invalid ciphertext payload: {e}")
        return _parse_amount(text)


default_codec = TaggedBase64Codec()


def encode(amount: int) -> str:
    return default_codec.encode(amount)


def decode(ciphertext: str) -> int:
    return default_codec.decode(ciphertext)
