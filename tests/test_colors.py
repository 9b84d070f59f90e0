from ossim.colors import IDLE_COLOR, PALETTE, color_map, color_of


def test_palette_cycles():
    assert color_of(0) == PALETTE[0]
    assert color_of(len(PALETTE)) == PALETTE[0]
    assert color_of(len(PALETTE) + 3) == PALETTE[3]
    assert IDLE_COLOR not in PALETTE


def test_color_map_follows_input_position():
    colors = color_map(["P3", "P1", "P2"])
    assert colors == {"P3": PALETTE[0], "P1": PALETTE[1], "P2": PALETTE[2]}
