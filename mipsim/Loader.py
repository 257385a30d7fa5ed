"""Reading and writing assembly sources and machine-code images."""
import logging
import os

import numpy as np

from Errors import ParseError

logger = logging.getLogger(__name__)


def words_to_bytes(words) -> bytes:
    """Little-endian image of a list of 32-bit words."""
    return np.asarray([w & 0xFFFFFFFF for w in words], dtype="<u4").tobytes()


def bytes_to_words(data: bytes):
    if len(data) % 4 != 0:
        raise ValueError(f"binary image length {len(data)} is not a multiple of 4")
    return [int(w) for w in np.frombuffer(data, dtype="<u4")]


def _check_exists(path):
    if not os.path.exists(path):
        raise FileNotFoundError(f"file not found: {path}")


def load_assembly_file(path: str) -> str:
    _check_exists(path)
    with open(path, "r", encoding="utf-8") as f:
        source = f.read()
    logger.info("Read assembly source %s (%d lines)", path, len(source.splitlines()))
    return source


def save_assembly_file(path: str, source: str):
    with open(path, "w", encoding="utf-8") as f:
        f.write(source)


def load_binary_file(path: str) -> bytes:
    _check_exists(path)
    with open(path, "rb") as f:
        return f.read()


def save_binary_file(path: str, content):
    """``content`` is either raw bytes or a list of words."""
    if not isinstance(content, (bytes, bytearray)):
        content = words_to_bytes(content)
    with open(path, "wb") as f:
        f.write(content)


def load_machine_code_text(path: str):
    """
    One instruction per line, as 32 binary digits or as 0x-prefixed hex.
    Blank lines and ``#`` comments are skipped.
    """
    _check_exists(path)
    words = []
    with open(path, "r", encoding="utf-8") as f:
        for number, raw in enumerate(f, start=1):
            line = raw.split("#")[0].strip()
            if not line:
                continue
            try:
                if line.lower().startswith("0x"):
                    word = int(line, 16)
                elif len(line) == 32 and set(line) <= {"0", "1"}:
                    word = int(line, 2)
                else:
                    raise ValueError(line)
            except ValueError:
                raise ParseError("expected 32-bit binary or 0x hex word", number, line) from None
            if word > 0xFFFFFFFF:
                raise ParseError("word wider than 32 bits", number, line)
            words.append(word)
    return words


def save_machine_code_text(path: str, words, binary: bool = False):
    with open(path, "w", encoding="utf-8") as f:
        for word in words:
            f.write(f"{word:032b}\n" if binary else f"0x{word:08X}\n")
