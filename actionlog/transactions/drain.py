"""
Drain-side helpers: cut the flattened list into fixed-size batches.
"""

from typing import Iterator, List

from ..chain.flat_list import DUMMY_LINK, FlatActionList, FlatListLink


def next_drain_batch(flat_list: FlatActionList, batch_size: int) -> List[FlatListLink]:
    """Pop up to ``batch_size`` links, padding the rest with dummy links."""
    batch = []
    for _ in range(batch_size):
        if flat_list.is_empty():
            batch.append(DUMMY_LINK)
        else:
            batch.append(flat_list.pop())
    return batch


def drain_batches(flat_list: FlatActionList, batch_size: int) -> Iterator[List[FlatListLink]]:
    """Yield batches until the list is empty; an empty list yields nothing."""
    while not flat_list.is_empty():
        yield next_drain_batch(flat_list, batch_size)


def batches_needed(length: int, batch_size: int) -> int:
    return -(-length // batch_size)
