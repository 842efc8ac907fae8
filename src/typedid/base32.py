"""Base32 codec for TypeID suffixes.

A 128-bit value is written as 26 symbols of 5 bits each, most significant
bit first. 26 * 5 = 130, so the first symbol only carries the top 3 bits of
the value and can never be above ``7``.
"""

from __future__ import annotations

from typedid.errors import Base32OverflowError, InvalidCharacterError, InvalidLengthError


# Crockford-style alphabet without i, l, o and u.
# Symbols are in ascending order so encoded strings sort like the bytes they encode.
ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"
_DECODE_MAP = {c: i for i, c in enumerate(ALPHABET)} | {
    c.upper(): i for i, c in enumerate(ALPHABET) if c.isalpha()
}

ENCODED_LENGTH = 26
DECODED_LENGTH = 16

_BITS_PER_SYMBOL = 5
_SYMBOL_MASK = 0x1F
_MAX_FIRST_SYMBOL = 7


def encode(data: bytes) -> str:
    """Encode 16 bytes as 26 lowercase base32 characters.

    Raises:
        InvalidLengthError: If ``data`` is not exactly 16 bytes long.
    """
    if len(data) != DECODED_LENGTH:
        raise InvalidLengthError(f"Expected {DECODED_LENGTH} bytes, got {len(data)}")
    num = int.from_bytes(data, "big")
    return "".join(
        ALPHABET[(num >> (_BITS_PER_SYMBOL * shift)) & _SYMBOL_MASK]
        for shift in reversed(range(ENCODED_LENGTH))
    )


def decode(text: str) -> bytes:
    """Decode 26 base32 characters into 16 bytes.

    Uppercase letters are accepted and treated as their lowercase symbol.

    Raises:
        InvalidLengthError: If ``text`` is not exactly 26 characters long.
        InvalidCharacterError: If ``text`` contains a character outside the alphabet.
        Base32OverflowError: If the value needs more than 128 bits.
    """
    if len(text) != ENCODED_LENGTH:
        raise InvalidLengthError(
            f"Encoded value must be {ENCODED_LENGTH} characters, got {len(text)}"
        )

    num = 0
    for char in text:
        value = _DECODE_MAP.get(char)
        if value is None:
            raise InvalidCharacterError(
                f"Invalid character {char!r}, must be one of [{ALPHABET}]"
            )
        num = (num << _BITS_PER_SYMBOL) | value

    if _DECODE_MAP[text[0]] > _MAX_FIRST_SYMBOL:
        raise Base32OverflowError(
            f"First character must be one of [01234567] to fit 128 bits, got {text[0]!r}"
        )
    return num.to_bytes(DECODED_LENGTH, "big")


__all__ = ["ALPHABET", "DECODED_LENGTH", "ENCODED_LENGTH", "decode", "encode"]
