"""Packed k-mer codes: two bits per base, first base most significant.

The base order A=0, C=1, T=2, G=3 fixes the k-mer table indices produced by
the accumulator and must not change.
"""

from streamqc.errors import AggregateMismatch

BASE_TO_BITS = {"A": 0, "C": 1, "T": 2, "G": 3}
BITS_TO_BASE = "ACTG"


def encode_kmer(sequence: str) -> int:
    """Pack a sequence over {A,C,T,G} into an integer code."""
    code = 0
    for base in sequence:
        try:
            code = (code << 2) | BASE_TO_BITS[base]
        except KeyError:
            raise ValueError(f"cannot encode non-ACTG base {base!r} in {sequence!r}") from None
    return code


def decode_kmer(code: int, kmer_size: int) -> str:
    """Unpack an integer code back into a sequence of ``kmer_size`` bases."""
    if code < 0 or code >= num_kmers(kmer_size):
        raise AggregateMismatch(f"k-mer code {code} out of range for k={kmer_size}")
    bases = []
    for _ in range(kmer_size):
        bases.append(BITS_TO_BASE[code & 3])
        code >>= 2
    return "".join(reversed(bases))


def num_kmers(kmer_size: int) -> int:
    return 1 << (2 * kmer_size)
