from typing import Any


def _print_mismatch(name: str, received, expected):
    msg = f"Unexpected {name}"
    if received is not None or expected is not None:
        msg += ";"
    if received is not None:
        msg += f" got `{str(received)}`"
    if received is not None and expected is not None:
        msg += ","
    if expected is not None:
        msg += f" expected `{str(expected)}`"
    return msg + "!"


class ArcError(Exception):
    pass


class MismatchError(ArcError):
    def __init__(self, name: str, received: Any = None, expected: Any = None):
        self.name = name
        self.received = received
        self.expected = expected

    def __str__(self):
        return _print_mismatch(self.name, self.received, self.expected)


class CorruptArchiveError(ArcError):
    """ The container breaks a structural rule of the format; nothing read from it can be trusted. """


class MagicMismatchError(MismatchError, CorruptArchiveError):
    def __init__(self, received: int = None, expected: int = None):
        super().__init__("Magic", _hex(received), _hex(expected))


class TruncatedSectionError(CorruptArchiveError):
    def __init__(self, section: str, requested: int, available: int):
        self.section = section
        self.requested = requested
        self.available = available

    def __str__(self):
        return f"`{self.section}` needs {self.requested} byte(s) but only {self.available} remain!"


class TableBoundsError(CorruptArchiveError, IndexError):
    def __init__(self, table: str, index: int, size: int):
        self.table = table
        self.index = index
        self.size = size

    def __str__(self):
        return f"Index `{self.index}` is outside of `{self.table}` (size {self.size})!"


class RedirectCycleError(CorruptArchiveError):
    def __init__(self, chain):
        self.chain = list(chain)

    def __str__(self):
        walked = " -> ".join(str(_) for _ in self.chain)
        return f"Redirect chain does not terminate: {walked}"


class DecompressionError(MismatchError):
    def __init__(self, received: int = None, expected: int = None):
        super().__init__("Decompressed Size", received, expected)


def _hex(value):
    return f"0x{value:016X}" if isinstance(value, int) else value


__all__ = [
    "ArcError",
    "MismatchError",
    "CorruptArchiveError",
    "MagicMismatchError",
    "TruncatedSectionError",
    "TableBoundsError",
    "RedirectCycleError",
    "DecompressionError",
]
