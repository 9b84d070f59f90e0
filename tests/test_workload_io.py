from pathlib import Path

import pytest

from ossim.models import DiskRequest, MemoryBlock, Process
from ossim.workload_io import load_blocks, load_disk_requests, load_workload, parse_int_list


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"pid":"B","arrival_time":1,"burst_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].priority == 1
    assert procs[1].priority == 0
    assert procs[1].arrival_time == 1


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2,\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[1].priority == 0


def test_bad_entries(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":"soon","burst_time":3}]')
    with pytest.raises(ValueError, match="Invalid process entry"):
        load_workload(p)

    with pytest.raises(ValueError, match="Unsupported"):
        load_workload(tmp_path / "w.yaml")

    obj = tmp_path / "obj.json"
    obj.write_text('{"pid": "A"}')
    with pytest.raises(ValueError, match="list"):
        load_workload(obj)


def test_load_blocks(tmp_path: Path):
    p = tmp_path / "blocks.json"
    p.write_text("[500, 300, 200]")
    assert load_blocks(p) == (
        MemoryBlock(block_id=0, size=500),
        MemoryBlock(block_id=1, size=300),
        MemoryBlock(block_id=2, size=200),
    )

    c = tmp_path / "blocks.csv"
    c.write_text("size\n100\n250\n")
    assert [b.size for b in load_blocks(c)] == [100, 250]


def test_load_disk_requests(tmp_path: Path):
    p = tmp_path / "disk.json"
    p.write_text('[{"cylinder": 98}, {"cylinder": 183}]')
    assert load_disk_requests(p) == [DiskRequest(1, 98), DiskRequest(2, 183)]

    c = tmp_path / "disk.csv"
    c.write_text("cylinder\n37\nabc\n")
    with pytest.raises(ValueError, match="Invalid cylinder"):
        load_disk_requests(c)


def test_parse_int_list():
    assert parse_int_list("98, 183,37 122") == [98, 183, 37, 122]
    with pytest.raises(ValueError):
        parse_int_list("1,two")
