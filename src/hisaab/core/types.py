"""Shared type aliases used across hisaab."""

from decimal import Decimal
from pathlib import Path

# Anything that coerces cleanly through Decimal(str(x))
Numeric = Decimal | int | float | str

# Path types
PathLike = str | Path
