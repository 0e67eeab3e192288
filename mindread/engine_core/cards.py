"""
Cards - The question cards and the answer accumulator.

Card i holds every number in [1, 2^bits - 1] whose bit i is set.
Answering "yes" to card i means bit i of the hidden number is 1, so the
number is the sum of 2^i over the cards answered "yes".

With the default 6 bits:
- 6 cards, 32 numbers each
- Range 1..63
"""

from __future__ import annotations

DEFAULT_BITS = 6


def max_number(bits: int = DEFAULT_BITS) -> int:
    """Largest number that can be guessed with the given bit width."""
    return 2**bits - 1


def generate_cards(bits: int = DEFAULT_BITS) -> tuple[tuple[int, ...], ...]:
    """
    Generate the question cards.

    Args:
        bits: Number of binary digits (one card per digit)

    Returns:
        Tuple of cards, least-significant bit first. Each card is a
        sorted tuple of the numbers that have that bit set.
    """
    if bits < 1:
        raise ValueError(f"bits must be at least 1, got {bits}")

    top = max_number(bits)
    return tuple(
        tuple(n for n in range(1, top + 1) if (n >> bit) & 1)
        for bit in range(bits)
    )


def compute_number(answers: tuple[bool, ...] | list[bool], bits: int = DEFAULT_BITS) -> int:
    """
    Reconstruct the hidden number from one answer per card.

    answers[i] is the answer to card i (least-significant first).
    Requires exactly `bits` answers; a partial sequence is a caller bug.
    """
    if len(answers) != bits:
        raise ValueError(f"Expected {bits} answers, got {len(answers)}")

    return sum(2**i for i, yes in enumerate(answers) if yes)


def answers_for(number: int, bits: int = DEFAULT_BITS) -> tuple[bool, ...]:
    """Card membership of `number`: the answers an honest player gives."""
    if not 1 <= number <= max_number(bits):
        raise ValueError(f"{number} is outside 1..{max_number(bits)}")

    return tuple(bool((number >> bit) & 1) for bit in range(bits))


# Computed once; tuples so nobody can mutate the shared cards
CARDS = generate_cards()
