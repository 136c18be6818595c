import pytest

from weatherhub.utils.batching import (
    DEFAULT_BATCH_SIZE,
    MAX_BATCH_SIZE,
    calculate_batch_count,
    partition,
    validate_batch_size,
)


def test_partition_keeps_order_and_puts_remainder_last():
    assert partition(["A", "B", "C", "D", "E"], 2) == [["A", "B"], ["C", "D"], ["E"]]


@pytest.mark.parametrize("total,batch_size", [(0, 1), (1, 1), (7, 3), (100, 50), (101, 50), (250, 100)])
def test_partition_sizes_and_concatenation(total, batch_size):
    items = list(range(total))
    batches = partition(items, batch_size)

    assert len(batches) == calculate_batch_count(total, batch_size)
    assert all(len(batch) == batch_size for batch in batches[:-1])
    if batches:
        assert 1 <= len(batches[-1]) <= batch_size
    assert [item for batch in batches for item in batch] == items


def test_partition_uses_default_batch_size():
    batches = partition(list(range(120)))
    assert [len(batch) for batch in batches] == [DEFAULT_BATCH_SIZE, DEFAULT_BATCH_SIZE, 20]


def test_empty_input_gives_no_batches():
    assert partition([], 10) == []
    assert calculate_batch_count(0, 10) == 0


@pytest.mark.parametrize("batch_size", [0, -1])
def test_non_positive_batch_size_is_rejected(batch_size):
    with pytest.raises(ValueError):
        partition([1, 2, 3], batch_size)
    with pytest.raises(ValueError):
        calculate_batch_count(3, batch_size)
    with pytest.raises(ValueError):
        validate_batch_size(batch_size)


def test_batch_size_above_maximum_is_rejected_not_clamped():
    validate_batch_size(MAX_BATCH_SIZE)
    with pytest.raises(ValueError, match=str(MAX_BATCH_SIZE)):
        validate_batch_size(MAX_BATCH_SIZE + 1)
