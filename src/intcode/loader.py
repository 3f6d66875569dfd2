"""Comma-separated program text (e.g. ``1,9,10,3,2,3,11,0,99,30,40,50``)."""

import pathlib
from typing import Iterable, List, Union

from .errors import ProgramFormatError


def parse_program(text: str) -> List[int]:
    """
    Parse comma-separated decimal integers into a memory list.

    Whitespace around cells and a trailing newline are ignored; blank text
    yields an empty program.

    Raises:
        ProgramFormatError: If a cell is not a decimal integer
    """
    text = text.strip()
    if not text:
        return []

    memory = []
    for index, cell in enumerate(text.split(',')):
        try:
            memory.append(int(cell.strip()))
        except ValueError as e:
            raise ProgramFormatError(index, cell) from e
    return memory


def load_program(path: Union[str, pathlib.Path]) -> List[int]:
    """Read and parse a program file."""
    return parse_program(pathlib.Path(path).read_text())


def format_program(memory: Iterable[int]) -> str:
    """Format a memory list as comma-separated text."""
    return ','.join(str(value) for value in memory)
