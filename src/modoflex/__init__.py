"""Hungarian-Spanish letter bubble game."""

__version__ = "0.1.0"
