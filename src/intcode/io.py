"""Input and output adapters for Program.run_with_io."""

import re
from collections import deque
from typing import Iterable, List, TextIO

from .errors import InputError, OutputError

DECIMAL_PATTERN = re.compile(r"[+-]?[0-9]+")


class LineInput:
    """Read one decimal integer per line from a text stream."""

    def __init__(self, stream: TextIO):
        self.stream = stream

    def __call__(self) -> int:
        try:
            line = self.stream.readline()
        except OSError as e:
            raise InputError(f"Failed to read input: {e}") from e
        if not line:
            raise InputError("Input exhausted")
        text = line.strip()
        if not DECIMAL_PATTERN.fullmatch(text):
            raise InputError(f"Input is not a decimal integer: {text!r}")
        return int(text)


class DecimalOutput:
    """Write each value in decimal to a text stream, followed by separator."""

    def __init__(self, stream: TextIO, separator: str = ""):
        self.stream = stream
        self.separator = separator

    def __call__(self, value: int) -> None:
        try:
            self.stream.write(f"{value}{self.separator}")
            self.stream.flush()
        except OSError as e:
            raise OutputError(f"Failed to write output: {e}") from e


class QueueInput:
    """Supply values from a fixed sequence, one per call."""

    def __init__(self, values: Iterable[int]):
        self.values = deque(values)

    def __call__(self) -> int:
        if not self.values:
            raise InputError("Input exhausted")
        return self.values.popleft()


class CollectOutput:
    """Append every emitted value to a list."""

    def __init__(self):
        self.values: List[int] = []

    def __call__(self, value: int) -> None:
        self.values.append(value)
