"""Capability interface the executors run against.

`Program` implements it directly; tests substitute a lightweight fake with
canned memory to exercise the resolver and executors in isolation.
"""

import abc


class System(abc.ABC):

    @abc.abstractmethod
    def memory_len(self) -> int:
        ...

    @abc.abstractmethod
    def read_memory(self, address: int) -> int:
        ...

    @abc.abstractmethod
    def write_memory(self, address: int, value: int) -> None:
        ...

    @abc.abstractmethod
    def read_instruction_pointer(self) -> int:
        ...

    @abc.abstractmethod
    def write_instruction_pointer(self, value: int) -> None:
        ...

    @abc.abstractmethod
    def read_input(self) -> int:
        """Obtain one value from the input source, or raise InputError."""

    @abc.abstractmethod
    def write_output(self, value: int) -> None:
        """Emit one value to the output sink, or raise OutputError."""
