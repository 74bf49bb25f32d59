# infrastructure/chunker.py
"""Fixed-size character chunking with overlap"""
from typing import List, Tuple

from core.exceptions import InvalidConfiguration


def validate_chunking(size: int, overlap: int) -> None:
    """Raises InvalidConfiguration unless size > 0 and 0 <= overlap < size."""
    if size <= 0:
        raise InvalidConfiguration(f"Chunk size must be positive, got {size}")
    if overlap < 0:
        raise InvalidConfiguration(f"Chunk overlap must not be negative, got {overlap}")
    if overlap >= size:
        raise InvalidConfiguration(
            f"Chunk overlap ({overlap}) must be smaller than chunk size ({size})"
        )


def chunk_spans(text_length: int, size: int, overlap: int) -> List[Tuple[int, int]]:
    """
    Character spans [start, end) for a text of the given length.

    Chunk i starts at i * (size - overlap). The walk stops at the first span
    that reaches the end of the text, so the last chunk may be shorter than
    `size` and is never padded.
    """
    validate_chunking(size, overlap)

    spans: List[Tuple[int, int]] = []
    step = size - overlap
    start = 0
    while start < text_length:
        end = min(start + size, text_length)
        spans.append((start, end))
        if end == text_length:
            break
        start += step
    return spans


def split_text(text: str, size: int, overlap: int) -> List[str]:
    """Split text into overlapping chunks. Pure: same input, same output."""
    return [text[start:end] for start, end in chunk_spans(len(text), size, overlap)]
