"""
Obfuscation - 项目文件混淆

Repeating-key XOR over a byte stream. Applying the transform twice with the
same key gives back the original bytes. This keeps exported projects away
from casual inspection; it is not encryption.
"""
from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

OBFUSCATION_KEY = b"clothtool:gctproject:v1"
CHUNK_SIZE = 1024 * 1024


def xor_bytes(data: bytes, key: bytes = OBFUSCATION_KEY, offset: int = 0) -> bytes:
    """XOR ``data`` with ``key`` as if ``data`` started ``offset`` bytes into the stream."""
    if not data:
        return b""
    if not key:
        raise ValueError("Obfuscation key must not be empty")
    key_len = len(key)
    start = offset % key_len
    reps = (start + len(data)) // key_len + 1
    stream = (key * reps)[start:start + len(data)]
    mixed = int.from_bytes(data, "big") ^ int.from_bytes(stream, "big")
    return mixed.to_bytes(len(data), "big")


def xor_stream(src: BinaryIO, dst: BinaryIO, key: bytes = OBFUSCATION_KEY, chunk_size: int = CHUNK_SIZE) -> int:
    """Transform ``src`` into ``dst`` chunk by chunk; returns bytes written."""
    offset = 0
    while True:
        chunk = src.read(chunk_size)
        if not chunk:
            break
        dst.write(xor_bytes(chunk, key, offset))
        offset += len(chunk)
    return offset


def xor_file(source: Path, destination: Path, key: bytes = OBFUSCATION_KEY) -> int:
    with open(source, "rb") as src, open(destination, "wb") as dst:
        return xor_stream(src, dst, key)


# 加密和解密是同一个操作
obfuscate = xor_bytes
deobfuscate = xor_bytes


__all__ = [
    "OBFUSCATION_KEY",
    "xor_bytes",
    "xor_stream",
    "xor_file",
    "obfuscate",
    "deobfuscate",
]
