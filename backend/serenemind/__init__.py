"""SereneMind backend - AI therapist chat service."""

__version__ = "1.0.0"
