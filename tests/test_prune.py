import numpy as np
from mvq.buckets import BucketTable, MAX_COLORS
from mvq.prune import prune, prune_pass


def color_for_key(key):
    # A color whose downsample444 key is `key`
    return ((key >> 8) & 0xf) << 20 | ((key >> 4) & 0xf) << 12 | (key & 0xf) << 4


def put(table, key, count):
    for _ in range(count):
        table.add(color_for_key(key))


def total_count(table):
    return sum(bucket.n for bucket in table)


def test_first_pass_only_surveys():
    table = BucketTable()
    put(table, 3, 4)
    put(table, 7, 2)
    colors, next_min = prune_pass(table, 0, 0)
    assert (colors, next_min) == (2, 2)
    assert table[3].n == 4 and table[7].n == 2


def test_prune_leaves_small_tables_alone():
    table = BucketTable()
    for key in range(0, 4096, 16): # 256 buckets
        put(table, key, 1)
    colors, passes = prune(table)
    assert colors == MAX_COLORS
    assert passes == 1
    assert total_count(table) == 256


def test_stop_flag_keeps_counting_without_merging():
    table = BucketTable()
    for key in range(1, 301):
        put(table, key, 1 if key % 2 else 5)

    colors, passes = prune(table)

    assert colors == 256
    assert passes == 2
    assert table[0].n == 1 # bucket 1 moved into the empty bucket 0
    assert table[1].n == 0
    assert table[2].n == 6
    assert table[88].n == 6
    assert table[89].n == 0 # 45th merge, count drops to 255 here
    assert table[90].n == 5
    assert table[91].n == 1 # under threshold but left alone after the stop
    assert table[299].n == 1
    assert total_count(table) == 150 * 5 + 150


def test_bucket_zero_is_dropped_when_pruned():
    table = BucketTable()
    put(table, 0, 1)
    for key in range(1, 258):
        put(table, key, 2)

    colors, next_min = prune_pass(table, 0, 0)
    assert (colors, next_min) == (258, 1)

    colors, next_min = prune_pass(table, next_min, colors)
    assert colors == 257
    assert next_min == 1 # sizes are taken at scan time
    assert table[0].n == 0
    assert total_count(table) == 257 * 2


def test_prune_terminates_on_full_table():
    rng = np.random.default_rng(7)
    table = BucketTable()
    table.fill(rng.integers(0, 1 << 24, size=50000, dtype=np.uint32))
    colors, passes = prune(table)

    assert colors <= MAX_COLORS
    assert colors == table.count_nonempty()


def test_run_of_small_buckets_slides_left_one_slot_per_pass():
    table = BucketTable()
    for key in range(3796, 4096):
        put(table, key, 1)

    colors, passes = prune(table)

    # Merging into an empty predecessor only moves a bucket, so the run
    # has to slide down to index 0 before any bucket is dropped
    assert colors <= MAX_COLORS
    assert passes == 3841
    assert sum(bucket.n for bucket in table) == colors # no two buckets ever combined
