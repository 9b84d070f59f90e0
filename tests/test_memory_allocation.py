import pytest

from ossim.errors import InvalidWorkloadError
from ossim.memory_allocation import add_block, allocate, create_blocks, deallocate, fragmentation
from ossim.models import MemoryBlock


def _blocks():
    return create_blocks([500, 300, 200, 400])


def test_create_blocks_numbers_from_zero():
    blocks = _blocks()
    assert [b.block_id for b in blocks] == [0, 1, 2, 3]
    assert not any(b.allocated for b in blocks)


def test_best_fit_picks_smallest_leftover():
    res = allocate(_blocks(), "P1", 150, "best-fit")
    assert res.success
    assert res.block_id == 2
    chosen = res.blocks[2]
    assert chosen.tenant == "P1"
    assert chosen.tenant_size == 150
    assert chosen.internal_fragmentation == 50


def test_first_fit_picks_first_large_enough():
    res = allocate(_blocks(), "P1", 350, "first-fit")
    assert res.block_id == 0
    res = allocate(res.blocks, "P2", 350, "first-fit")
    assert res.block_id == 3


def test_worst_fit_picks_largest_leftover():
    res = allocate(_blocks(), "P1", 150, "worst-fit")
    assert res.block_id == 0
    assert res.blocks[0].internal_fragmentation == 350


def test_ties_go_to_the_first_block():
    blocks = create_blocks([300, 200, 300, 200])
    assert allocate(blocks, "P1", 100, "best-fit").block_id == 1
    assert allocate(blocks, "P1", 100, "worst-fit").block_id == 0


def test_allocation_skips_occupied_blocks():
    blocks = allocate(_blocks(), "P1", 150, "best-fit").blocks
    res = allocate(blocks, "P2", 150, "best-fit")
    assert res.block_id == 1


def test_allocate_does_not_touch_input():
    blocks = _blocks()
    allocate(blocks, "P1", 100, "first-fit")
    assert blocks == _blocks()


@pytest.mark.parametrize(
    "name, size, message",
    [
        ("", 100, "required"),
        ("   ", 100, "required"),
        ("P1", 0, "positive"),
        ("P1", -5, "positive"),
        ("P1", 501, "No suitable block"),
    ],
)
def test_allocation_failures_are_results(name, size, message):
    blocks = _blocks()
    res = allocate(blocks, name, size, "first-fit")
    assert not res.success
    assert message in res.message
    assert res.blocks == blocks
    assert res.block_id is None


def test_tenant_names_are_unique():
    blocks = allocate(_blocks(), "P1", 100, "first-fit").blocks
    res = allocate(blocks, "P1", 100, "first-fit")
    assert not res.success
    assert "already" in res.message


def test_deallocate_clears_tenant():
    blocks = allocate(_blocks(), "P1", 150, "best-fit").blocks
    res = deallocate(blocks, "P1")
    assert res.success
    assert res.block_id == 2
    assert res.blocks[2] == MemoryBlock(block_id=2, size=200)
    assert res.blocks[2].internal_fragmentation == 0


def test_deallocate_unknown_tenant_fails():
    res = deallocate(_blocks(), "ghost")
    assert not res.success
    assert "not found" in res.message


def test_add_block_ids():
    assert add_block((), 100) == (MemoryBlock(block_id=0, size=100),)
    blocks = add_block(_blocks(), 700)
    assert blocks[-1] == MemoryBlock(block_id=4, size=700)
    # Ids follow the highest in use, not the count.
    sparse = (MemoryBlock(block_id=7, size=10),)
    assert add_block(sparse, 20)[-1].block_id == 8
    with pytest.raises(InvalidWorkloadError):
        add_block(_blocks(), 0)


def test_unknown_policy():
    with pytest.raises(ValueError):
        allocate(_blocks(), "P1", 10, "next-fit")


def test_fragmentation_report():
    blocks = allocate(_blocks(), "P1", 150, "best-fit").blocks
    blocks = allocate(blocks, "P2", 450, "best-fit").blocks
    report = fragmentation(blocks)

    assert report.total_memory == 1400
    assert report.total_allocated_memory == 600
    assert report.internal_fragmentation == 50 + 50
    assert report.total_free_memory == 300 + 400
    assert report.external_fragmentation == report.total_free_memory
    # Slack inside allocated blocks is neither free nor allocated.
    assert report.total_allocated_memory + report.total_free_memory == 1300
    assert report.utilization_percentage == pytest.approx(600 / 1400 * 100)


def test_fragmentation_of_empty_memory():
    report = fragmentation(())
    assert report.total_memory == 0
    assert report.utilization_percentage == 0.0


def test_deallocate_trims_tenant_name_like_allocate():
    blocks = allocate(create_blocks([100]), " P1 ", 50, "first-fit").blocks
    assert blocks[0].tenant == "P1"
    res = deallocate(blocks, " P1 ")
    assert res.success
    assert not res.blocks[0].allocated
