"""Split documents into overlapping character windows for embedding."""

from __future__ import annotations

from collections.abc import Sequence

# Preferred cut points, strongest first. A cut lands just after the separator.
_BOUNDARIES = ("\n\n", "\n", " ", "\t")


def _check_params(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError(f"overlap must be in [0, chunk_size), got {overlap} for chunk_size {chunk_size}")


def _find_cut(text: str, floor: int, limit: int) -> int:
    """Return the best cut position in (floor, limit], falling back to limit."""
    for sep in _BOUNDARIES:
        idx = text.rfind(sep, floor, limit)
        if idx != -1:
            return idx + len(sep)
    return limit


def chunk_text(text: str, chunk_size: int = 500, overlap: int = 64) -> list[str]:
    """
    Split text into windows of at most chunk_size characters.

    Every chunk after the first starts with exactly the last `overlap`
    characters of the chunk before it, so merge_chunks(chunks, overlap)
    gives back the original text. Cuts prefer paragraph, line and word
    boundaries in the back half of the window; text with no boundary is
    cut at chunk_size.
    """
    _check_params(chunk_size, overlap)
    if not text:
        return []
    if len(text) <= chunk_size:
        return [text]

    chunks: list[str] = []
    start = 0
    while True:
        limit = start + chunk_size
        if limit >= len(text):
            chunks.append(text[start:])
            break
        # Keep the cut far enough along that the next window still advances.
        floor = start + max(overlap + 1, chunk_size // 2)
        end = _find_cut(text, floor, limit)
        chunks.append(text[start:end])
        start = end - overlap
    return chunks


def merge_chunks(chunks: Sequence[str], overlap: int | Sequence[int] = 0) -> str:
    """Concatenate chunks, dropping each chunk's leading overlap.

    `overlap` is either one width for every chunk after the first or a
    per-chunk list (the first entry is ignored).
    """
    if not chunks:
        return ""
    if isinstance(overlap, int):
        widths = [0] + [overlap] * (len(chunks) - 1)
    else:
        widths = list(overlap)
        if len(widths) != len(chunks):
            raise ValueError("overlap list must match the number of chunks")
    parts = [chunks[0]]
    for chunk, width in zip(chunks[1:], widths[1:]):
        parts.append(chunk[width:])
    return "".join(parts)
