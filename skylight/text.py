"""Character-cell text rendering onto a 32-bit framebuffer with an 8x8 font."""

from array import array
from enum import IntEnum
from typing import Tuple, Union

BACKGROUND_COLOR = 0x00111111
GLYPH_WIDTH = 8
GLYPH_HEIGHT = 8


class Color(IntEnum):
    """Sixteen text colour codes; a cell colour packs a foreground and a background."""

    BLACK = 0
    BLUE = 1
    GREEN = 2
    CYAN = 3
    RED = 4
    MAGENTA = 5
    BROWN = 6
    LIGHT_GREY = 7
    DARK_GREY = 8
    LIGHT_BLUE = 9
    LIGHT_GREEN = 10
    LIGHT_CYAN = 11
    LIGHT_RED = 12
    LIGHT_MAGENTA = 13
    LIGHT_BROWN = 14
    WHITE = 15


_PALETTE = {
    Color.BLACK: BACKGROUND_COLOR,
    Color.WHITE: 0xFFFFFF,
    Color.RED: 0xFF0000,
    Color.BLUE: 0x2222FF,
    Color.GREEN: 0x22FF22,
    Color.CYAN: 0x11FFFF,
    Color.MAGENTA: 0xFF01AA,
    Color.BROWN: 0xFFEBCD,
    Color.LIGHT_GREY: 0xDDDDDD,
    Color.DARK_GREY: 0x555555,
    Color.LIGHT_BLUE: 0x01AAFF,
    Color.LIGHT_GREEN: 0x01FF01,
    Color.LIGHT_CYAN: 0x01DDFF,
    Color.LIGHT_RED: 0xFF2222,
    Color.LIGHT_MAGENTA: 0xFF0077,
    Color.LIGHT_BROWN: 0x8B4513,
}


def color_combo(fg: int, bg: int) -> int:
    """Pack a foreground and background code into one cell colour."""
    return ((int(bg) << 4) | int(fg)) & 0xFF


def color_fg(color: int) -> int:
    return int(color) & 0x0F


def color_bg(color: int) -> int:
    return (int(color) & 0xFF) >> 4


def translate_color(code: int) -> int:
    """RGB value for a colour code; unknown codes give the background colour."""
    try:
        return _PALETTE[Color(code)]
    except ValueError:
        return BACKGROUND_COLOR


# One 64-bit glyph per byte value; bit (row * 8 + column) is set for a lit pixel,
# with the lowest byte holding the top row.
_FONT: Tuple[int, ...] = (
    0x0000000000000000, 0x0000000000000000, 0x000000FF00000000, 0x000000FF00FF0000,
    0x1818_181F_181F_1818, 0x6C6C6C6C6C6C6C6C, 0x181818F800000000, 0x6C6C6CEC0CFC0000,
    0x1818181F00000000, 0x6C6C6C6F607F0000, 0x000000F818181818, 0x000000FC0CEC6C6C,
    0x0000001F18181818, 0x0000007F606F6C6C, 0x187E7EFFFF7E7E18, 0x0081818181818100,
    0x0000000000000000, 0x0000000000000000, 0x0000000000000000, 0x0000000000000000,
    0x0000000000000000, 0x0000000000000000, 0x0000000000000000, 0x0000000000000000,
    0x0000000000000000, 0x0000000000000000, 0x0000000000000000, 0x0000000000000000,
    0x0000000000000000, 0x0000000000000000, 0x0000000000000000, 0x0008000000000000,
    0x0000000000000000, 0x00180018183C3C18, 0x0000_0000_0024_2424, 0x006C6CFE6CFE6C6C,
    0x00187ED07C16FC30, 0x0060660C18306606, 0x00DC66B61C36361C, 0x0000_0000_0008_1818,
    0x0030180C0C0C1830, 0x000C18303030180C, 0x0000187E3C7E1800, 0x000018187E181800,
    0x0C18180000000000, 0x000000007E000000, 0x0018_1800_0000_0000, 0x0000060C18306000,
    0x003C42464A52623C, 0x007E101010101C10, 0x007E04081020423C, 0x003C42403840423C,
    0x0020207E22242830, 0x003C4240403E027E, 0x003C42423E020438, 0x000404081020407E,
    0x003C42423C42423C, 0x001C20407C42423C, 0x0018_1800_1818_0000, 0x0C18180018180000,
    0x0030180C060C1830, 0x0000007E007E0000, 0x000C18306030180C, 0x001800181830663C,
    0x003C06765676663C, 0x0042427E42422418, 0x003E42423E42423E, 0x003C42020202423C,
    0x001E22424242221E, 0x007E02023E02027E, 0x000202023E02027E, 0x003C42427202423C,
    0x004242427E424242, 0x007C10101010107C, 0x001C22202020207E, 0x004222120E0A1222,
    0x007E020202020202, 0x0082828292AAC682, 0x00424262524A4642, 0x003C42424242423C,
    0x000202023E42423E, 0x005C22424242423C, 0x004242423E42423E, 0x003C42403C02423C,
    0x001010101010107C, 0x003C424242424242, 0x0018244242424242, 0x0044AAAA92828282,
    0x0042422418244242, 0x0010101038444444, 0x007E04081020407E, 0x003E02020202023E,
    0x00006030180C0600, 0x007C40404040407C, 0x000000000000663C, 0xFF00000000000000,
    0x000000000030180C, 0x007C427C403C0000, 0x003E4242423E0202, 0x003C4202423C0000,
    0x007C4242427C4040, 0x003C027E423C0000, 0x000404043E040438, 0x3C407C42427C0000,
    0x00424242423E0202, 0x003C1010101C0018, 0x0E101010101C0018, 0x0042221E22420200,
    0x003C101010101018, 0x00829292AA440000, 0x00424242423E0000, 0x003C4242423C0000,
    0x02023E42423E0000, 0xC0407C42427C0000, 0x00020202463A0000, 0x003E403C027C0000,
    0x00380404043E0404, 0x003C424242420000, 0x0018244242420000, 0x006C929292820000,
    0x0042241824420000, 0x3C407C4242420000, 0x007E0418207E0000, 0x003018180E181830,
    0x0018_1818_1818_1818, 0x000C18187018180C, 0x000000000062D68C, 0xFFFFFFFFFFFFFFFF,
    0x1E30181E3303331E, 0x007E333333003300, 0x001E033F331E0038, 0x00FC667C603CC37E,
    0x007E333E301E0033, 0x007E333E301E0007, 0x007E333E301E0C0C, 0x3C603E03033E0000,
    0x003C067E663CC37E, 0x001E033F331E0033, 0x001E033F331E0007, 0x001E0C0C0C0E0033,
    0x003C1818181C633E, 0x001E0C0C0C0E0007, 0x00333F33331E0C33, 0x00333F331E000C0C,
    0x003F061E063F0038, 0x00FE33FE30FE0000, 0x007333337F33367C, 0x001E33331E00331E,
    0x001E33331E003300, 0x001E33331E000700, 0x007E33333300331E, 0x007E333333000700,
    0x1F303F3333003300, 0x001C3E63633E1C63, 0x001E333333330033, 0x18187E03037E1818,
    0x003F67060F26361C, 0x000C3F0C3F1E3333, 0x70337B332F1B1B0F, 0x0E1B18187E18D870,
    0x007E333E301E0038, 0x001E0C0C0C0E001C, 0x001E33331E003800, 0x007E333333003800,
    0x003333331F001F00, 0x00333B3F3733003F, 0x00007E007C36363C, 0x00007E003C66663C,
    0x001E3303060C000C, 0x000003033F000000, 0x000030303F000000, 0xF81973C67C1B3363,
    0xC0F9F3E6CF1B3363, 0x183C3C1818001800, 0x0000CC663366CC00, 0x00003366CC663300,
    0x2288_2288_2288_2288, 0x55AA55AA55AA55AA, 0xEEBBEEBBEEBBEEBB, 0x1818_1818_1818_1818,
    0x1818181F18181818, 0x1818181F181F1818, 0x6C6C6C6F6C6C6C6C, 0x6C6C6C7F00000000,
    0x1818181F181F0000, 0x6C6C6C6F606F6C6C, 0x6C6C6C6C6C6C6C6C, 0x6C6C6C6F607F0000,
    0x0000007F606F6C6C, 0x0000007F6C6C6C6C, 0x0000001F181F1818, 0x1818181F00000000,
    0x000000F818181818, 0x000000FF18181818, 0x181818FF00000000, 0x181818F818181818,
    0x000000FF00000000, 0x181818FF18181818, 0x181818F818F81818, 0x6C6C6CEC6C6C6C6C,
    0x000000FC0CEC6C6C, 0x6C6C6CEC0CFC0000, 0x000000FF00EF6C6C, 0x6C6C6CEF00FF0000,
    0x6C6C6CEC0CEC6C6C, 0x000000FF00FF0000, 0x6C6C6CEF00EF6C6C, 0x000000FF00FF1818,
    0x000000FF6C6C6C6C, 0x181818FF00FF0000, 0x6C6C6CFF00000000, 0x000000FC6C6C6C6C,
    0x000000F818F81818, 0x181818F818F80000, 0x6C6C6CFC00000000, 0x6C6C6CEF6C6C6C6C,
    0x181818FF00FF1818, 0x0000001F18181818, 0x181818F800000000, 0xFFFFFFFFFFFFFFFF,
    0xFFFFFFFF00000000, 0x0F0F0F0F0F0F0F0F, 0xF0F0F0F0F0F0F0F0, 0x00000000FFFFFFFF,
    0x006E3B133B6E0000, 0x03031F331F331E00, 0x0003030303637F00, 0x0036363636367F00,
    0x007F660C180C667F, 0x001E3333337E0000, 0x03063E6666666600, 0x00181818183B6E00,
    0x3F0C1E33331E0C3F, 0x001C36637F63361C, 0x007736366363361C, 0x001E33333E180C38,
    0x00007EDBDB7E0000, 0x03067EDBDB7E3060, 0x003C06033F03063C, 0x003333333333331E,
    0x00003F003F003F00, 0x003F000C0C3F0C0C, 0x003F00060C180C06, 0x003F00180C060C18,
    0x1818181818D8D870, 0x0E1B1B1818181818, 0x000C0C003F000C0C, 0x0000394E00394E00,
    0x000000001C36361C, 0x0000_0018_1800_0000, 0x0000_0000_1800_0000, 0x383C3637303030F0,
    0x000000363636361E, 0x0000003E061C301E, 0x00003C3C3C3C0000, 0xFFFFFFFFFFFFFFFF,
)


def _char_code(char: Union[str, int]) -> int:
    if isinstance(char, str):
        if len(char) != 1:
            raise ValueError(f"expected a single character, got {char!r}")
        return ord(char) & 0xFF
    return int(char) & 0xFF


class TextRenderer:
    """Draws 8x8 glyphs into an in-memory framebuffer of 0xRRGGBB pixels."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("screen dimensions must be positive")
        self.glyph_width = GLYPH_WIDTH
        self.glyph_height = GLYPH_HEIGHT
        self.width = width
        self.height = height
        self.cols = width // GLYPH_WIDTH
        self.rows = height // GLYPH_HEIGHT
        self._fb = array("I", bytes(4 * width * height))
        self.ready = True
        self.clear()

    @property
    def framebuffer(self) -> Tuple[int, ...]:
        return tuple(self._fb)

    def clear(self) -> None:
        """Set every pixel to zero."""
        if not self.ready:
            return
        self._fb = array("I", bytes(4 * self.width * self.height))

    def stop(self) -> None:
        """Release the screen; further drawing does nothing."""
        self.ready = False

    def _cell_origin(self, col: int, row: int) -> Tuple[int, int]:
        x, y = col * GLYPH_WIDTH, row * GLYPH_HEIGHT
        if x < 0 or y < 0 or x + GLYPH_WIDTH > self.width or y + GLYPH_HEIGHT > self.height:
            raise IndexError(f"cell ({col}, {row}) is outside the screen")
        return x, y

    def place_at(self, col: int, row: int, char: Union[str, int], color: int) -> None:
        """Draw ``char`` in the cell at (col, row) with a packed colour."""
        if not self.ready:
            return
        glyph = _FONT[_char_code(char)]
        fore = translate_color(color_fg(color))
        back = translate_color(color_bg(color))
        x0, y0 = self._cell_origin(col, row)
        for dy in range(GLYPH_HEIGHT):
            line = (y0 + dy) * self.width + x0
            for dx in range(GLYPH_WIDTH):
                lit = (glyph >> (dy * self.glyph_width + dx)) & 1
                self._fb[line + dx] = fore if lit else back

    def clean_at(self, col: int, row: int) -> None:
        """Zero the pixels of the cell at (col, row)."""
        if not self.ready:
            return
        x0, y0 = self._cell_origin(col, row)
        for dy in range(GLYPH_HEIGHT):
            line = (y0 + dy) * self.width + x0
            self._fb[line:line + GLYPH_WIDTH] = array("I", bytes(4 * GLYPH_WIDTH))

    def pixel(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the screen")
        return self._fb[y * self.width + x]

    def pos_convert(self, col: int, row: int) -> Tuple[int, int]:
        """Scale a column and row by the size of one cell on this screen."""
        if self.cols == 0 or self.rows == 0:
            raise ValueError("screen is smaller than one character cell")
        return col * (self.width // self.cols), row * (self.height // self.rows)