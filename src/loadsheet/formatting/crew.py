"""Cosmetic crew filler for printed loadsheets.

The "PREPARED BY" block of a preliminary loadsheet carries a load
controller name and licence number. They have no operational meaning, so
they are generated, but from a seedable source so that a rendered sheet is
reproducible.

Typical usage:
    from loadsheet.formatting.crew import CrewFillerGenerator

    crew = CrewFillerGenerator(seed=1)
    crew.name()  # e.g. "Emily/Garcia"
    crew.licence()  # e.g. "QKD407"
"""

import random
import string


class CrewFillerGenerator:
    """Generate load controller names and licence numbers.

    Examples:
        >>> crew = CrewFillerGenerator(seed=3)
        >>> len(crew.licence())
        6
    """

    FIRST_NAMES = [
        "John",
        "Jane",
        "Michael",
        "Emily",
        "David",
        "Sarah",
        "Christopher",
        "Jennifer",
        "Daniel",
        "Jessica",
    ]

    LAST_NAMES = [
        "Smith",
        "Johnson",
        "Williams",
        "Brown",
        "Jones",
        "Garcia",
        "Miller",
        "Davis",
        "Martinez",
        "Hernandez",
    ]

    # Three letters followed by three digits
    LICENCE_PATTERN = "{l}{l}{l}{d}{d}{d}"

    def __init__(self, rng: random.Random | None = None, seed: int | None = None) -> None:
        """Initialize the generator.

        Args:
            rng: Random source. Takes precedence over seed.
            seed: Seed used to build a random source when rng is not given.
        """
        self.rng = rng if rng is not None else random.Random(seed)

    def name(self) -> str:
        """Generate a "First/Last" crew name."""
        return f"{self.rng.choice(self.FIRST_NAMES)}/{self.rng.choice(self.LAST_NAMES)}"

    def licence(self) -> str:
        """Generate a licence number such as "ABC123"."""
        return self._fill_pattern(self.LICENCE_PATTERN)

    def _fill_pattern(self, pattern: str) -> str:
        """Replace each {d} with a digit and each {l} with an uppercase letter."""
        result = pattern
        while "{d}" in result:
            result = result.replace("{d}", str(self.rng.randint(0, 9)), 1)
        while "{l}" in result:
            result = result.replace("{l}", self.rng.choice(string.ascii_uppercase), 1)
        return result
