"""Travel experience search: relational keyword search, autocomplete and a search client."""

__version__ = "1.0.0"
