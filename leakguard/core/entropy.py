"""Shannon entropy scoring."""

import math
from collections import Counter


def shannon_entropy(data: str) -> float:
    """
    Calculate Shannon entropy of a string in bits per character.

    Args:
        data: String to analyze

    Returns:
        Entropy value (higher = more random), 0.0 for empty or single-symbol strings
    """
    if not data:
        return 0.0

    length = len(data)
    entropy = 0.0
    # Sorted counts keep the float summation identical for any permutation of data
    for count in sorted(Counter(data).values()):
        probability = count / length
        entropy -= probability * math.log2(probability)
    return abs(entropy)
