"""Contract tests for IdGenerators whose ids sort in creation order."""

import concurrent.futures as cf

import pytest


@pytest.mark.parametrize("count", [2_000, 10_000])
def test_monotonic_order_single_thread(monotonic_id_generators, count):
    """IDs are lexicographically increasing within a thread."""
    ids = [monotonic_id_generators.new_id() for _ in range(count)]
    assert ids == sorted(ids)
    assert len(set(ids)) == count


def test_monotonic_order_per_thread(monotonic_id_generators):
    """Each thread sees increasing ids even while others draw from the generator."""

    def _burst(_: int) -> list[str]:
        return [monotonic_id_generators.new_id() for _ in range(500)]

    with cf.ThreadPoolExecutor(max_workers=8) as ex:
        bursts = list(ex.map(_burst, range(8)))

    for ids in bursts:
        assert ids == sorted(ids)
