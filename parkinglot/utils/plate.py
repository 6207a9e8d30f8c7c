# parkinglot/utils/plate.py
"""Plate number sanitizing and validation. Used before any record is created."""

import re

from parkinglot.exceptions import ValidationError

PLATE_MIN_LENGTH = 3
PLATE_MAX_LENGTH = 10

_DISALLOWED = re.compile(r"[^A-Za-z0-9\-]")


def sanitize_plate(raw: str) -> str:
    """Strip everything except letters, digits and dashes, then uppercase."""
    return _DISALLOWED.sub("", raw or "").upper()


def normalize_plate(raw: str) -> str:
    plate = sanitize_plate(raw)
    if not plate:
        raise ValidationError("Please enter a plate number")
    if len(plate) < PLATE_MIN_LENGTH:
        raise ValidationError(f"Plate number must be at least {PLATE_MIN_LENGTH} characters")
    if len(plate) > PLATE_MAX_LENGTH:
        raise ValidationError("Plate number is too long")
    return plate
