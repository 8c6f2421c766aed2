from abc import ABC, abstractmethod

import numpy as np

from screening.errors import InvalidConfigurationError


class BitStore(ABC):
    """
    Fixed size array of bits addressed modulo its size.
    BloomFilter only depends on this contract, so the bits may live in local
    memory or in a shared store.
    """

    @property
    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def set(self, index: int) -> bool:
        """Marks the bit, returns False if it was already set"""
        pass

    @abstractmethod
    def get(self, index: int) -> bool:
        pass

    def __len__(self) -> int:
        return self.size


class BitArray(BitStore):
    """
    In-memory bit store packed eight bits to a byte
    Args:
        size: number of addressable bits, must be positive
    """

    def __init__(self, size: int):
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise InvalidConfigurationError(f"Bit array size must be a positive integer, got {size!r}")
        self._size = size
        self._bytes = np.zeros((size + 7) // 8, dtype=np.uint8)

    @property
    def size(self) -> int:
        return self._size

    @property
    def nbytes(self) -> int:
        return int(self._bytes.nbytes)

    @property
    def bit_array(self) -> np.ndarray:
        """The packed storage, exposed for inspection"""
        return self._bytes

    def set(self, index: int) -> bool:
        index %= self._size
        byte, mask = index >> 3, 1 << (index & 7)
        if self._bytes[byte] & mask:
            return False
        self._bytes[byte] |= mask
        return True

    def get(self, index: int) -> bool:
        index %= self._size
        return bool(self._bytes[index >> 3] & (1 << (index & 7)))

    def count(self) -> int:
        """Number of bits currently set"""
        return int(np.unpackbits(self._bytes).sum())
