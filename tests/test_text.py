import pytest

from skylight.text import (
    BACKGROUND_COLOR,
    GLYPH_HEIGHT,
    GLYPH_WIDTH,
    Color,
    TextRenderer,
    color_bg,
    color_combo,
    color_fg,
    translate_color,
)


@pytest.fixture
def renderer():
    return TextRenderer(640, 480)


@pytest.mark.parametrize(
    "code, rgb",
    [
        (Color.WHITE, 0xFFFFFF),
        (Color.RED, 0xFF0000),
        (Color.BLUE, 0x2222FF),
        (Color.LIGHT_BROWN, 0x8B4513),
        (Color.BLACK, BACKGROUND_COLOR),
    ],
)
def test_translate_color_palette(code, rgb):
    assert translate_color(code) == rgb


def test_translate_unknown_code_gives_background():
    assert translate_color(99) == BACKGROUND_COLOR


@pytest.mark.parametrize("fg", list(Color))
@pytest.mark.parametrize("bg", [Color.BLACK, Color.RED, Color.WHITE])
def test_color_combo_round_trip(fg, bg):
    packed = color_combo(fg, bg)
    assert color_fg(packed) == fg
    assert color_bg(packed) == bg


def test_dimensions(renderer):
    assert renderer.cols == 640 // GLYPH_WIDTH
    assert renderer.rows == 480 // GLYPH_HEIGHT


def test_new_screen_is_blank(renderer):
    assert set(renderer.framebuffer) == {0}


def test_place_glyph_top_row(renderer):
    renderer.place_at(0, 0, "A", color_combo(Color.WHITE, Color.BLACK))
    assert renderer.pixel(3, 0) == 0xFFFFFF
    assert renderer.pixel(4, 0) == 0xFFFFFF
    assert renderer.pixel(0, 0) == BACKGROUND_COLOR
    assert {renderer.pixel(x, 7) for x in range(8)} == {BACKGROUND_COLOR}


def test_place_glyph_in_other_cell(renderer):
    renderer.place_at(2, 1, "A", Color.WHITE)
    assert renderer.pixel(2 * GLYPH_WIDTH + 3, GLYPH_HEIGHT) == 0xFFFFFF
    assert renderer.pixel(3, 0) == 0


def test_space_uses_background_colour(renderer):
    renderer.place_at(0, 0, " ", color_combo(Color.WHITE, Color.RED))
    cell = {renderer.pixel(x, y) for x in range(8) for y in range(8)}
    assert cell == {0xFF0000}


def test_clean_at_zeroes_cell(renderer):
    renderer.place_at(1, 1, "#", Color.GREEN)
    renderer.clean_at(1, 1)
    cell = {renderer.pixel(x, y) for x in range(8, 16) for y in range(8, 16)}
    assert cell == {0}


def test_clear_zeroes_screen(renderer):
    renderer.place_at(0, 0, "Z", Color.CYAN)
    renderer.clear()
    assert set(renderer.framebuffer) == {0}


def test_stop_disables_drawing(renderer):
    renderer.stop()
    renderer.place_at(0, 0, "A", Color.WHITE)
    assert renderer.ready is False
    assert renderer.pixel(3, 0) == 0


def test_out_of_range_cell_raises(renderer):
    with pytest.raises(IndexError):
        renderer.place_at(renderer.cols, 0, "A", Color.WHITE)
    with pytest.raises(IndexError):
        renderer.pixel(640, 0)


def test_pos_convert(renderer):
    assert renderer.pos_convert(3, 2) == (24, 16)


def test_invalid_dimensions():
    with pytest.raises(ValueError):
        TextRenderer(0, 10)