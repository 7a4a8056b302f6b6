from typing import Tuple

from mvq.buckets import BucketTable, MAX_COLORS

NO_MIN = 0x7fffffff


def prune_pass(table: BucketTable, threshold: int, remaining: int) -> Tuple[int, int]:
    """
    Run one pruning pass over the table in ascending index order.

    Every non-empty bucket of size <= threshold is folded into the bucket just
    before it and cleared, until the running count drops below MAX_COLORS.
    From then on small buckets are left where they are, but the scan carries
    on so the smallest size is still seen. Bucket 0 has no predecessor; its
    content is dropped.

    Args:
        table (BucketTable): The bucket table, mutated in place.
        threshold (int): Buckets with at most this many colors are merged.
        remaining (int): Non-empty bucket count left by the previous pass.

    Returns:
        Tuple[int, int]: (non-empty buckets after the pass, smallest non-empty
            bucket size seen during the scan). The latter is the next threshold.
    """
    stop_pruning = False
    next_min = NO_MIN
    buckets = table.buckets

    for i, bucket in enumerate(buckets):
        size = bucket.n # size at scan time, before any later neighbor merges into it
        if size == 0:
            continue
        if size < next_min:
            next_min = size
        if size <= threshold:
            if not stop_pruning:
                if i > 0:
                    buckets[i - 1].merge(bucket)
                remaining -= 1
                bucket.clear()
            if remaining < MAX_COLORS:
                stop_pruning = True

    # A merge into an empty predecessor moves a bucket rather than removing it,
    # so the running count is only used to decide when to stop.
    return table.count_nonempty(), next_min


def prune(table: BucketTable) -> Tuple[int, int]:
    """
    Prune the table until at most MAX_COLORS buckets are non-empty.

    The first pass uses a threshold of 0, which merges nothing and only
    surveys the bucket sizes. Each later pass uses the smallest size seen
    by the pass before it.

    A pass does not always shrink the table: a bucket merged into an empty
    predecessor just moves one slot down. A run of small buckets high in the
    table can take thousands of passes to reach index 0, where buckets are
    finally dropped.

    Returns:
        Tuple[int, int]: (non-empty buckets remaining, passes run).
    """
    threshold = 0
    colors = 0
    passes = 0
    while True:
        colors, threshold = prune_pass(table, threshold, colors)
        passes += 1
        if colors <= MAX_COLORS:
            return colors, passes
