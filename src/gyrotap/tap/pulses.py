"""
Pulse Encoding
==============

This module turns data bytes into TAP pulse bytes. Each pulse byte in a
TAP v1 stream is a pulse length in units of 8 CPU cycles; an emulator (or
a TAP-to-WAV tool feeding a real deck) replays them as square waves.

Two encodings are used on a Gyrospeed tape:

**Standard (CBM ROM) encoding** - used for the loader header and boot
blocks so the KERNAL can read them:

    new-data marker     LONG, MEDIUM
    8 data bits         LSB first; 1 = MEDIUM, SHORT   0 = SHORT, MEDIUM
    parity bit          odd parity (starts at 1, flips on every 1-bit)

**Turbo encoding** - used for the program itself by the Gyrospeed loader:

    8 data bits         MSB first; one pulse per bit, TURBO_ON or TURBO_OFF

There is no framing or parity in turbo mode. Instead the session keeps a
running XOR of every turbo byte written, which the writer appends once the
whole payload has gone out.

Timing
------
Every pulse adds ``pulse * 8 / PAL_CLOCK_HZ`` seconds to the session's
elapsed time, and every pause adds ``cycles / PAL_CLOCK_HZ``. The elapsed
time is what the compilation packer uses as a program's duration.

Usage
-----
    >>> encoder = PulseEncoder()
    >>> encoder.encode_byte(0xA5, EncodingMode.TURBO)
    >>> bytes(encoder.output)
    b'*\\x15*\\x15\\x15*\\x15*'
    >>> encoder.turbo_checksum
    165
"""

from enum import Enum
from typing import Final, Iterable

from gyrotap.errors import InvalidArgumentError


# =============================================================================
# Pulse Constants
# =============================================================================

# CBM ROM loader pulse lengths
SHORT_PULSE: Final[int] = 0x2F
MEDIUM_PULSE: Final[int] = 0x42
LONG_PULSE: Final[int] = 0x56

# Gyrospeed turbo pulse lengths
TURBO_OFF_PULSE: Final[int] = 0x15
TURBO_ON_PULSE: Final[int] = 0x2A

# PAL CPU clock: the VIC-II colour clock (17.734475 MHz) divided by 18
PAL_CLOCK_HZ: Final[int] = 985248

# Pauses longer than this must use the 4-byte long-pause marker
LONG_PAUSE_THRESHOLD: Final[int] = 0x800

# Largest pause the 3-byte cycle count can express
MAX_PAUSE_CYCLES: Final[int] = 0xFFFFFF


class EncodingMode(Enum):
    """The two bit encodings written to a Gyrospeed tape."""
    STANDARD = "standard"
    TURBO = "turbo"


def pulse_seconds(pulse: int) -> float:
    """Playback time of a single TAP pulse byte on a PAL machine."""
    return (pulse * 8) / PAL_CLOCK_HZ


def cycles_seconds(clock_cycles: int) -> float:
    """Playback time of a pause of ``clock_cycles`` on a PAL machine."""
    return clock_cycles / PAL_CLOCK_HZ


# =============================================================================
# Encoder Session
# =============================================================================

class PulseEncoder:
    """
    Encoder session for one tape image.

    The session owns the pulse output buffer, the elapsed playback time and
    the running turbo checksum. Call begin() before each program so that no
    timing or checksum state leaks from one program into the next.

    Attributes:
        output: The pulse bytes written so far
        elapsed_seconds: Playback time of everything written since begin()
        turbo_checksum: XOR of every turbo byte since the last reset
    """

    def __init__(self) -> None:
        self.output = bytearray()
        self.elapsed_seconds = 0.0
        self.turbo_checksum = 0

    def begin(self) -> None:
        """Start a new program: clear the output, time and checksum."""
        self.output = bytearray()
        self.elapsed_seconds = 0.0
        self.turbo_checksum = 0

    def reset_turbo_checksum(self) -> None:
        """Zero the running turbo checksum before a new turbo payload."""
        self.turbo_checksum = 0

    # =========================================================================
    # Raw Pulses
    # =========================================================================

    def write_pulse(self, pulse: int) -> None:
        """Append one raw pulse byte and account for its duration."""
        self.output.append(pulse)
        self.elapsed_seconds += pulse_seconds(pulse)

    def write_pulses(self, pulse: int, count: int) -> None:
        """
        Append a run of identical raw pulses (pilot tones and trailers).

        The run's duration is accounted in one step as ``seconds * count``.
        """
        self.output.extend(bytes([pulse]) * count)
        self.elapsed_seconds += pulse_seconds(pulse) * count

    def write_pause(self, clock_cycles: int) -> None:
        """
        Append a long pause (silence) marker.

        TAP v1 encodes pauses of more than 2048 cycles as a zero byte
        followed by the cycle count as a 24-bit little-endian integer.

        Raises:
            InvalidArgumentError: If the pause is too short for the long
                form or too long for 24 bits
        """
        if not LONG_PAUSE_THRESHOLD < clock_cycles <= MAX_PAUSE_CYCLES:
            raise InvalidArgumentError(
                f"Pause of {clock_cycles} cycles cannot be written as a long pause"
            )
        self.output.append(0x00)
        self.output.extend(clock_cycles.to_bytes(3, "little"))
        self.elapsed_seconds += cycles_seconds(clock_cycles)

    def write_end_of_data_marker(self) -> None:
        """Append the CBM end-of-data marker (LONG, SHORT)."""
        self.write_pulse(LONG_PULSE)
        self.write_pulse(SHORT_PULSE)

    # =========================================================================
    # Byte Encoding
    # =========================================================================

    def encode_byte(self, value: int, mode: EncodingMode = EncodingMode.STANDARD) -> None:
        """
        Encode one data byte in the given mode.

        Args:
            value: Byte to encode (0-255)
            mode: STANDARD for CBM ROM framing, TURBO for Gyrospeed bits
        """
        if not 0 <= value <= 0xFF:
            raise InvalidArgumentError(f"Value {value} is not a byte")

        if mode is EncodingMode.TURBO:
            for bit in range(7, -1, -1):
                self.write_pulse(TURBO_ON_PULSE if value & (1 << bit) else TURBO_OFF_PULSE)
            self.turbo_checksum ^= value
            return

        # New data marker
        self.write_pulse(LONG_PULSE)
        self.write_pulse(MEDIUM_PULSE)

        parity = True
        for bit in range(8):
            is_set = bool(value & (1 << bit))
            if is_set:
                parity = not parity
            self._write_standard_bit(is_set)

        self._write_standard_bit(parity)

    def _write_standard_bit(self, is_set: bool) -> None:
        if is_set:
            self.write_pulse(MEDIUM_PULSE)
            self.write_pulse(SHORT_PULSE)
        else:
            self.write_pulse(SHORT_PULSE)
            self.write_pulse(MEDIUM_PULSE)

    def write_repeated(self, value: int, count: int,
                       mode: EncodingMode = EncodingMode.STANDARD) -> None:
        """Encode the same byte ``count`` times."""
        for _ in range(count):
            self.encode_byte(value, mode)

    def write_range(self, buffer: Iterable[int], start: int = 0,
                    mode: EncodingMode = EncodingMode.STANDARD) -> None:
        """Encode every byte of ``buffer[start:]`` in order."""
        for value in bytes(buffer)[start:]:
            self.encode_byte(value, mode)
