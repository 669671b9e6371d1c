"""File integrity checks."""

import hashlib
from pathlib import Path

import aiofiles
import aiofiles.os

CHUNK_SIZE = 64 * 1024


async def sha1_of(file_path: Path) -> str:
    """SHA1 hex digest of the whole file."""
    hash_sha1 = hashlib.sha1()
    async with aiofiles.open(file_path, 'rb') as f:
        while chunk := await f.read(CHUNK_SIZE):
            hash_sha1.update(chunk)
    return hash_sha1.hexdigest()


async def verify_file(file_path: Path, expected_sha1: str, expected_size: int) -> bool:
    """Check that a file exists with the expected size and SHA1.

    Any failure, including an unreadable file, counts as a mismatch.
    """
    try:
        if not await aiofiles.os.path.isfile(file_path):
            return False
        if await aiofiles.os.path.getsize(file_path) != expected_size:
            return False
        return await sha1_of(file_path) == expected_sha1.lower()
    except OSError:
        return False
