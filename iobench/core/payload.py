"""Random file content shared by every write of a run."""

from typing import Optional
import numpy as np

# Printable ASCII, both ends inclusive
LOWEST_BYTE = 32
HIGHEST_BYTE = 126

_CHUNK_SIZE = 16 * 1024 * 1024


class RandomPayloadGenerator:
    """Produces buffers of independently drawn printable ASCII bytes.

    The content only needs to be incompressible enough to defeat sparse-file
    and zero-page shortcuts in the storage stack; it is not meant to be secure.
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)

    def generate(self, size: int) -> bytes:
        if size <= 0:
            raise ValueError(f"Payload size must be positive: {size}")

        buffer = bytearray(size)
        view = memoryview(buffer)
        for offset in range(0, size, _CHUNK_SIZE):
            length = min(_CHUNK_SIZE, size - offset)
            chunk = self._rng.integers(LOWEST_BYTE, HIGHEST_BYTE + 1, size=length, dtype=np.uint8)
            view[offset:offset + length] = chunk.tobytes()
        return bytes(buffer)
