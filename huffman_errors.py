class HuffmanError(Exception): # base for everything the codec raises
    pass


class FormatError(HuffmanError, ValueError):
    """Malformed frequency-table line or a character outside the packing alphabet."""


class UnderflowError(HuffmanError, IndexError):
    """Bits (or heap entries) ran out before the operation could finish."""


class KeyNotFoundError(HuffmanError, KeyError):
    """Symbol is not part of the active frequency table."""


class ArgumentError(HuffmanError, ValueError):
    """Degenerate input, e.g. an empty frequency table."""
