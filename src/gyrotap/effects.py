"""
Loading Effects and Found-Message Styling
=========================================

The Gyrospeed loader calls a small routine every time it reads a bit. The
routine lives in the loader header at offset $a6 and is what paints the
border stripes while a program loads. Routines:

- may be at most $1c bytes long
- may freely use $fc, $fd and the X register (zeroed at start-up and
  persistent between calls) and the accumulator, but not Y
- can take entropy from ($c1),y (last byte read) or $bd (the bits of the
  byte currently being read)
- must be quick, as they run once per bit

The "found" message that the KERNAL prints when the header is read can be
styled by prefixing the filename with PETSCII control codes: a clear-screen
code and/or a text colour code.

Random Selection
----------------
When the user asks for a random effect or colour, every program draws a new
one that differs from the previous pick, using sample_excluding() over an
injectable random.Random so tests can seed it.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Final, Optional
import random

from gyrotap.errors import InvalidArgumentError


# =============================================================================
# Loading Effects
# =============================================================================

# Size of the effect routine region in the loader header
MAX_EFFECT_LENGTH: Final[int] = 0x1C


@dataclass(frozen=True)
class LoadingEffect:
    """A named loading-effect routine (6502 machine code)."""
    key: str
    name: str
    code: bytes

    def __post_init__(self) -> None:
        if len(self.code) > MAX_EFFECT_LENGTH:
            raise InvalidArgumentError(
                f"Loading effect '{self.name}' is {len(self.code)} bytes, "
                f"maximum is {MAX_EFFECT_LENGTH}"
            )


LOADING_EFFECTS: Final[tuple[LoadingEffect, ...]] = (
    # inc $d020 / rts
    LoadingEffect("0", "Original", bytes([0xEE, 0x20, 0xD0, 0x60])),
    LoadingEffect("1", "Original Double Height", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x03, 0xEE, 0x20, 0xD0, 0x60,
    ])),
    LoadingEffect("2", "Freeload Style", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x14, 0xA5, 0xFD, 0xC5, 0xC2, 0xAD, 0x20,
        0xD0, 0xB0, 0x06, 0x69, 0x01, 0xE6, 0xFD, 0xE6, 0xFD, 0x49, 0x05, 0x8D,
        0x20, 0xD0, 0x60,
    ])),
    # Freeload with eor #$08
    LoadingEffect("3", "Freeload Alt Style", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x14, 0xA5, 0xFD, 0xC5, 0xC2, 0xAD, 0x20,
        0xD0, 0xB0, 0x06, 0x69, 0x01, 0xE6, 0xFD, 0xE6, 0xFD, 0x49, 0x08, 0x8D,
        0x20, 0xD0, 0x60,
    ])),
    LoadingEffect("4", "Stripe Columns", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0x8D, 0x20, 0xD0, 0xA9, 0x00, 0x8D, 0x20, 0xD0,
        0x60,
    ])),
    LoadingEffect("5", "Medium Stripes", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x04, 0x90, 0x07, 0xEE, 0x20, 0xD0, 0xA9,
        0x00, 0x85, 0xFD, 0x60,
    ])),
    # cmp #$0b gives slightly thicker lines than Medium Stripes
    LoadingEffect("6", "Thick Stripes (US Gold Style)", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x0B, 0x90, 0x07, 0xEE, 0x20, 0xD0, 0xA9,
        0x00, 0x85, 0xFD, 0x60,
    ])),
    LoadingEffect("7", "Black and White", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x04, 0x90, 0x0B, 0xA5, 0xFE, 0x49, 0x01,
        0x8D, 0x20, 0xD0, 0x85, 0xFD, 0x85, 0xFE, 0x60,
    ])),
    LoadingEffect("8", "Jolly Stripes", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x04, 0x90, 0x0E, 0xAD, 0x20, 0xD0, 0x69,
        0x01, 0x49, 0x05, 0x8D, 0x20, 0xD0, 0xA9, 0x00, 0x85, 0xFD, 0x60,
    ])),
    # lda $bd / eor ($c1),y - colour follows the data being read
    LoadingEffect("9", "Mixed-Up (Rack It Style)", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x07, 0xA5, 0xBD, 0x51, 0xC1, 0x8D, 0x20,
        0xD0, 0x60,
    ])),
    LoadingEffect("A", "Hi-Tec Stripe Columns", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x06, 0xCE, 0x20, 0xD0, 0xEE, 0x20, 0xD0,
        0x60,
    ])),
    LoadingEffect("B", "Black and Red Stripes", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x04, 0x90, 0x0B, 0xA5, 0xFE, 0x49, 0x02,
        0x8D, 0x20, 0xD0, 0x85, 0xFD, 0x85, 0xFE, 0x60,
    ])),
    # Also pokes $d418 (SID volume) for the noise
    LoadingEffect("C", "Flashing with Flatulence", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x03, 0x90, 0x0A, 0xEE, 0x20, 0xD0, 0xEE,
        0x18, 0xD4, 0xA9, 0x00, 0x85, 0xFD, 0x60,
    ])),
    LoadingEffect("D", "Titus Black and Light Blue", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x0A, 0xA9, 0x0E, 0x8D, 0x20, 0xD0, 0xA9,
        0x00, 0x8D, 0x20, 0xD0, 0x60,
    ])),
    LoadingEffect("E", "Cruncher AB Depack FX", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x04, 0x90, 0x0D, 0xE6, 0xFE, 0xA5, 0xFE,
        0x29, 0x05, 0x8D, 0x20, 0xD0, 0xA9, 0x00, 0x85, 0xFD, 0x60,
    ])),
    # Freeload with eor #$0f
    LoadingEffect("F", "Gremlin Style (Alt. World Games)", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x14, 0xA5, 0xFD, 0xC5, 0xC2, 0xAD, 0x20,
        0xD0, 0xB0, 0x06, 0x69, 0x01, 0xE6, 0xFD, 0xE6, 0xFD, 0x49, 0x0F, 0x8D,
        0x20, 0xD0, 0x60,
    ])),
    LoadingEffect("G", "Firebird Black and Blue (Black Lamp Style)", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x0F, 0x90, 0x0B, 0xA5, 0xFE, 0x49, 0x06,
        0x8D, 0x20, 0xD0, 0x85, 0xFD, 0x85, 0xFE, 0x60,
    ])),
    LoadingEffect("H", "Two Shades of Grey with Noise", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x0C, 0xE6, 0xFD, 0xA5, 0xFD, 0x09, 0x0B,
        0x8D, 0x20, 0xD0, 0x8D, 0x18, 0xD4, 0x60,
    ])),
    LoadingEffect("I", "Black and White Stripe Columns", bytes([
        0x8A, 0x49, 0x01, 0xAA, 0xF0, 0x0A, 0xA9, 0x01, 0x8D, 0x20, 0xD0, 0xA9,
        0x00, 0x8D, 0x20, 0xD0, 0x60,
    ])),
    LoadingEffect("J", "It's a Sin!", bytes([
        0xE6, 0xFD, 0xA5, 0xFD, 0xC9, 0x01, 0x90, 0x10, 0xAD, 0x20, 0xD0, 0x49,
        0x09, 0x8D, 0x20, 0xD0, 0xAD, 0x18, 0xD4, 0x49, 0x0F, 0x8D, 0x18, 0xD4,
        0x60,
    ])),
)


def effect_index(key: str) -> int:
    """
    Look up a loading effect by its menu key (0-9, A-J, case-insensitive).

    Raises:
        InvalidArgumentError: If no effect has that key
    """
    wanted = key.strip().upper()
    for index, effect in enumerate(LOADING_EFFECTS):
        if effect.key == wanted:
            return index
    valid = ", ".join(effect.key for effect in LOADING_EFFECTS)
    raise InvalidArgumentError(f"Unknown loading effect '{key}'. Choose from: {valid}")


# =============================================================================
# Found Message Styling
# =============================================================================

# CHR$(147) clears the screen when the KERNAL prints the found message
CHR_CLEAR_SCREEN: Final[int] = 0x93


class TextColour(IntEnum):
    """PETSCII colour control codes, in the C64 palette order."""
    BLACK = 0x90
    WHITE = 0x05
    RED = 0x1C
    CYAN = 0x9F
    PURPLE = 0x9C
    GREEN = 0x1E
    YELLOW = 0x9E
    ORANGE = 0x81
    BROWN = 0x95
    LIGHT_RED = 0x96
    DARK_GREY = 0x97
    GREY = 0x98
    LIGHT_GREEN = 0x99
    LIGHT_BLUE = 0x9A
    LIGHT_GREY = 0x9B

    @classmethod
    def from_name(cls, name: str) -> "TextColour":
        """Parse a colour name such as 'light-blue' or 'LIGHT_BLUE'."""
        key = name.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            valid = ", ".join(c.name.lower().replace("_", "-") for c in cls)
            raise InvalidArgumentError(f"Unknown colour '{name}'. Choose from: {valid}") from None


TEXT_COLOURS: Final[tuple[TextColour, ...]] = tuple(TextColour)

# The screen colour the KERNAL already prints in
DEFAULT_TEXT_COLOUR: Final[TextColour] = TextColour.LIGHT_BLUE


@dataclass(frozen=True)
class FoundMessageStyle:
    """
    PETSCII prefix for the filename shown in the found message.

    Attributes:
        clear_screen: Prefix CHR$(147) to clear the screen
        colour: Text colour, or None to keep the default light blue
    """
    clear_screen: bool = False
    colour: Optional[TextColour] = None

    def prefix(self) -> bytes:
        """The control bytes to place in front of the filename."""
        codes = bytearray()
        if self.clear_screen:
            codes.append(CHR_CLEAR_SCREEN)
        if self.colour is not None and self.colour != DEFAULT_TEXT_COLOUR:
            codes.append(self.colour)
        return bytes(codes)


# =============================================================================
# Random Selection
# =============================================================================

def sample_excluding(rng: random.Random, population: int, previous: int) -> int:
    """
    Pick a random index in ``range(population)`` that differs from ``previous``.

    Uses rejection sampling so that consecutive programs never get the
    same effect or colour. With a population of one the only index is
    returned.
    """
    if population < 1:
        raise InvalidArgumentError("Cannot sample from an empty population")
    if population == 1:
        return 0

    while True:
        choice = rng.randrange(population)
        if choice != previous:
            return choice
