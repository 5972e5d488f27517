"""Chunked, concurrent submission of encoded contract calls."""

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split a sequence into consecutive chunks of at most ``size`` items."""
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


async def submit_batch(
    records: Sequence[T],
    chunk_size: int,
    encode: Callable[[T], str],
    submit: Callable[[int, list[str]], Awaitable[R]],
    on_confirmed: Callable[[list[T], R], Awaitable[None]] | None = None,
) -> list[R]:
    """Submit records as one aggregated transaction per chunk.

    Every record is encoded before anything is submitted, so an encoding
    error aborts the batch before any network call. Chunks are then
    submitted concurrently; ``on_confirmed`` runs as soon as each chunk's
    ``submit`` returns.

    A failing chunk does not stop the others. Once all chunks are done the
    first failure is raised.

    Args:
        records: Records to submit, in order
        chunk_size: Maximum records per transaction
        encode: Turns one record into call data
        submit: Sends one chunk's call data (with the chunk index) and waits for it
        on_confirmed: Called with the chunk's records and the submit result

    Returns:
        Submit results, in chunk order
    """
    chunks = chunk(records, chunk_size)
    if not chunks:
        return []

    encoded = [[encode(record) for record in c] for c in chunks]

    async def run(index: int) -> R:
        result = await submit(index, encoded[index])
        if on_confirmed is not None:
            await on_confirmed(chunks[index], result)
        return result

    outcomes = await asyncio.gather(*(run(i) for i in range(len(chunks))), return_exceptions=True)

    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)
