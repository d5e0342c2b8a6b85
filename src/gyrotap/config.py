"""
Converter Configuration
=======================

Everything the conversion pipeline needs to know besides the input path.
Configuration can come from:
- Default values (defined here)
- Environment variables (ConverterConfig.from_env)
- Command-line options, which the CLI applies on top

Environment Variables
---------------------
    GYROTAP_ASSET_DIR    Directory holding the loader PRGs
    GYROTAP_EFFECT       Loading effect key (0-9, A-J) or R for random
    GYROTAP_COLOUR       Found-message colour name or R for random
    GYROTAP_TAPE_LENGTH  Compilation tape length in minutes (e.g. 90)
    GYROTAP_SEED         Seed for random effect/colour selection

Invalid values are ignored and the default is kept.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

from gyrotap.assets import BOOT_FILENAME, HEADER_FILENAME
from gyrotap.effects import FoundMessageStyle, TextColour, effect_index
from gyrotap.errors import InvalidArgumentError

RANDOM_CHOICE = "R"
MIN_TAPE_LENGTH_MINUTES = 2


@dataclass
class ConverterConfig:
    """
    Configuration for a conversion run.

    Attributes:
        asset_dir: Directory holding the loader header and boot PRGs
        header_filename: Loader header file name
        boot_filename: Boot code file name
        effect: Loading effect index, or None to pick randomly per program
        colour: Found-message colour, or None for the default light blue
        random_colour: Pick a random colour per program (overrides colour)
        clear_screen: Clear the screen before the found message
        tape_length_minutes: Build compilations for tapes this long (C60 = 60)
        keep_individual: Keep per-program TAP files after building compilations
        output_dir: Where to write TAP files (None = derive from the input)
        seed: Random seed (None = seed from the OS)
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # ASSETS
    # ═══════════════════════════════════════════════════════════════════════════

    asset_dir: Path = field(default_factory=Path.cwd)
    header_filename: str = HEADER_FILENAME
    boot_filename: str = BOOT_FILENAME

    # ═══════════════════════════════════════════════════════════════════════════
    # LOADER APPEARANCE
    # ═══════════════════════════════════════════════════════════════════════════

    effect: Optional[int] = 0
    colour: Optional[TextColour] = None
    random_colour: bool = False
    clear_screen: bool = False

    # ═══════════════════════════════════════════════════════════════════════════
    # OUTPUT
    # ═══════════════════════════════════════════════════════════════════════════

    tape_length_minutes: Optional[int] = None
    keep_individual: bool = False
    output_dir: Optional[Path] = None
    seed: Optional[int] = None

    @property
    def random_effect(self) -> bool:
        return self.effect is None

    @property
    def builds_compilations(self) -> bool:
        return self.tape_length_minutes is not None

    def found_message_style(self) -> FoundMessageStyle:
        """Style for the first program (random colours are redrawn per program)."""
        return FoundMessageStyle(clear_screen=self.clear_screen, colour=self.colour)

    def set_effect(self, key: str) -> None:
        """Apply an effect key, or R for a random effect per program."""
        if key.strip().upper() == RANDOM_CHOICE:
            self.effect = None
        else:
            self.effect = effect_index(key)

    def set_colour(self, name: str) -> None:
        """Apply a colour name, or R for a random colour per program."""
        if name.strip().upper() == RANDOM_CHOICE:
            self.random_colour = True
            self.colour = None
        else:
            self.random_colour = False
            self.colour = TextColour.from_name(name)

    @classmethod
    def from_env(cls) -> "ConverterConfig":
        """
        Create a ConverterConfig from environment variables.

        Returns:
            ConverterConfig with any valid environment overrides applied
        """
        config = cls()

        if asset_dir := os.environ.get("GYROTAP_ASSET_DIR"):
            config.asset_dir = Path(asset_dir)

        if effect := os.environ.get("GYROTAP_EFFECT"):
            try:
                config.set_effect(effect)
            except InvalidArgumentError:
                pass  # Ignore invalid values

        if colour := os.environ.get("GYROTAP_COLOUR"):
            try:
                config.set_colour(colour)
            except InvalidArgumentError:
                pass

        if tape_length := os.environ.get("GYROTAP_TAPE_LENGTH"):
            try:
                minutes = int(tape_length)
            except ValueError:
                minutes = None
            if minutes is not None and minutes >= MIN_TAPE_LENGTH_MINUTES:
                config.tape_length_minutes = minutes

        if seed := os.environ.get("GYROTAP_SEED"):
            try:
                config.seed = int(seed)
            except ValueError:
                pass

        return config
