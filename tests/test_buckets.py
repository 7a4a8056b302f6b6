import numpy as np
from mvq.buckets import Bucket, BucketTable, BUCKET_COUNT, downsample444, downsample444_array


def test_downsample444_keeps_top_nibble_of_each_channel():
    assert downsample444(0x000000) == 0x000
    assert downsample444(0xffffff) == 0xfff
    assert downsample444(0x123456) == 0x135
    assert downsample444(0x0f0f0f) == 0x000


def test_downsample444_ignores_bits_above_24():
    assert downsample444(0xff123456) == downsample444(0x123456)


def test_downsample444_array_matches_scalar():
    colors = np.array([0x000000, 0xffffff, 0x123456, 0x80ff01, 0x7f7f7f], dtype=np.uint32)
    assert downsample444_array(colors).tolist() == [downsample444(int(c)) for c in colors]


def test_bucket_average_rounds_to_nearest():
    bucket = Bucket()
    bucket.add(0x000000)
    bucket.add(0x020202)
    assert bucket.n == 2
    assert bucket.average() == 0x010101

    halfway = Bucket()
    halfway.add(0x010000)
    halfway.add(0x020000)
    assert halfway.average() == 0x020000 # (1 + 2 + 1) // 2


def test_empty_bucket_averages_to_zero():
    assert Bucket().average() == 0


def test_bucket_merge_and_clear():
    a, b = Bucket(), Bucket()
    a.add(0x102030)
    b.add(0x010203)
    b.add(0x010203)
    a.merge(b)
    assert (a.r, a.g, a.b, a.n) == (0x10 + 2, 0x20 + 4, 0x30 + 6, 3)
    a.clear()
    assert (a.r, a.g, a.b, a.n) == (0, 0, 0, 0)


def test_table_fill_accumulates_per_key():
    table = BucketTable()
    assert len(table) == BUCKET_COUNT
    table.fill(np.array([0x000000, 0x020202, 0xffffff], dtype=np.uint32))

    assert table[0].n == 2
    assert (table[0].r, table[0].g, table[0].b) == (2, 2, 2)
    assert table[0xfff].n == 1
    assert table.count_nonempty() == 2


def test_table_fill_resets_previous_run():
    table = BucketTable()
    table.fill(np.arange(0, 1 << 24, 4099, dtype=np.uint32))
    assert table.count_nonempty() > 256

    table.fill(np.array([0x336699] * 5, dtype=np.uint32))
    assert table.count_nonempty() == 1
    assert table[downsample444(0x336699)].n == 5


def test_table_fill_with_empty_image():
    table = BucketTable()
    table.add(0x123456)
    table.fill(np.zeros(0, dtype=np.uint32))
    assert table.count_nonempty() == 0
