"""
Bloom filter used to screen passwords against large word lists.

Sized from the number of expected elements ``n`` and the target false
positive probability ``p``::

    m = ceil(-(n * ln p) / ln(2)^2)       bits
    k = round((m / n) * ln 2)             probes per item

Probe positions are derived by double hashing the two halves of a 64-bit
MurmurHash3 digest, ``(h1 + i * h2) mod m`` for ``i`` in ``[0, k)``, with
``h2`` reduced mod ``m`` and moved up to the next value coprime with ``m``
so the ``k`` probes of an item are distinct.
"""
import math
from typing import Callable, Iterable, List, Optional

import mmh3

from screening.bit_array import BitArray, BitStore
from screening.errors import InvalidConfigurationError
from screening.events import EventCallback, emitter

LN2 = math.log(2)


def optimal_num_bits(expected_elements: int, false_positive_probability: float) -> int:
    bits = -(expected_elements * math.log(false_positive_probability)) / (LN2 ** 2)
    return max(1, math.ceil(bits))


def optimal_num_hashes(num_bits: int, expected_elements: int) -> int:
    # round half up, not python's round half to even
    return max(1, math.floor((num_bits / expected_elements) * LN2 + 0.5))


def _validate(expected_elements, false_positive_probability):
    if isinstance(expected_elements, bool) or not isinstance(expected_elements, int) or expected_elements <= 0:
        raise InvalidConfigurationError(
            f"Expected elements must be a positive integer, got {expected_elements!r}"
        )
    if not isinstance(false_positive_probability, (int, float)) or not 0 < false_positive_probability < 1:
        raise InvalidConfigurationError(
            f"False positive probability must be between 0 and 1 exclusive, got {false_positive_probability!r}"
        )


class BloomFilter():
    """
    Append only probabilistic set of strings.
    No false negatives: anything added is always reported as present.
    Args:
        expected_elements: number of items the filter is sized for
        false_positive_probability: target false positive rate once full
        bits_factory: builds the bit store from a size, BitArray by default
        seed: MurmurHash3 seed
        on_event: optional callback receiving construction events
    """

    def __init__(self, expected_elements: int, false_positive_probability: float, *,
                 bits_factory: Callable[[int], BitStore] = BitArray, seed: int = 0,
                 on_event: Optional[EventCallback] = None):
        _validate(expected_elements, false_positive_probability)
        self.expected_elements = expected_elements
        self.false_positive_probability = float(false_positive_probability)
        self.seed = seed
        size = optimal_num_bits(expected_elements, false_positive_probability)
        self.bits = bits_factory(size)
        if self.bits.size != size:
            raise InvalidConfigurationError(
                f"Bit store has {self.bits.size} bits but the filter needs {size}"
            )
        self.num_hashes = optimal_num_hashes(size, expected_elements)
        self.count = 0
        emitter(on_event)("filter_created", {
            "expected_elements": expected_elements,
            "false_positive_probability": self.false_positive_probability,
            "size_bits": size,
            "num_hashes": self.num_hashes,
        })

    @classmethod
    def build(cls, expected_elements: int, false_positive_probability: float, **kwargs) -> "BloomFilter":
        return cls(expected_elements, false_positive_probability, **kwargs)

    @property
    def size(self) -> int:
        return self.bits.size

    def _get_hash_positions(self, item: str) -> List[int]:
        h1, h2 = mmh3.hash64(item.encode("utf-8"), seed=self.seed, signed=False)
        size = self.bits.size
        # the step must be coprime with size or the probes share one residue class
        h2 %= size
        while math.gcd(h2, size) != 1:
            h2 += 1
        return [(h1 + i * h2) % size for i in range(self.num_hashes)]

    def add(self, item: str) -> bool:
        """
        Sets every probe bit for the item.
        Returns True if any of them was unset, meaning the item was probably new.
        """
        added = False
        for position in self._get_hash_positions(item):
            if self.bits.set(position):
                added = True
        if added:
            self.count += 1
        return added

    def add_all(self, items: Iterable[str]) -> int:
        """Adds every item and returns how many were new"""
        return sum(1 for item in items if self.add(item))

    def contains(self, item: str) -> bool:
        for position in self._get_hash_positions(item):
            if not self.bits.get(position):
                return False
        return True

    __contains__ = contains

    def estimated_false_positive_probability(self) -> float:
        """False positive probability for the number of items inserted so far"""
        return (1 - math.exp(-self.num_hashes * self.count / self.size)) ** self.num_hashes

    def get_info(self) -> dict:
        info = {
            "capacity": self.expected_elements,
            "error_rate": self.false_positive_probability,
            "items_added": self.count,
            "size_bits": self.size,
            "hash_functions": self.num_hashes,
            "load_factor": self.count / self.expected_elements,
            "estimated_error_rate": self.estimated_false_positive_probability(),
        }
        nbytes = getattr(self.bits, "nbytes", None)
        info["size_bytes"] = nbytes if nbytes is not None else (self.size + 7) // 8
        return info

    def __repr__(self):
        return (f"BloomFilter(expected_elements={self.expected_elements}, "
                f"false_positive_probability={self.false_positive_probability}, "
                f"size={self.size}, num_hashes={self.num_hashes}, count={self.count})")
