# -*- coding: utf-8 -*-
"""
RU: Hex-кодек для вывода результатов оракула (только кодирование; разбор
hex из файлов векторов выполняет внешний стенд).
"""
from __future__ import annotations

from typing import Union


def encode_hex(data: Union[bytes, bytearray, memoryview]) -> str:
    """
    Encode bytes to a lowercase hexadecimal string.

    Args:
        data: bytes to encode.

    Returns:
        Lowercase hex string of length 2 * len(data), high nibble first.

    Raises:
        TypeError: if data is not bytes-like.

    Examples:
        >>> encode_hex(bytes([0x00, 0xFF, 0x10]))
        '00ff10'
        >>> encode_hex(b"")
        ''
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"data must be bytes-like, got {type(data).__name__}")
    return bytes(data).hex()


__all__ = [
    "encode_hex",
]
