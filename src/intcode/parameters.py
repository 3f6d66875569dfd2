from enum import Enum
from typing import List, Sequence, Tuple

from .errors import AddressOutOfRange, NotEnoughParameters, ReadModeMismatch
from .opcode import ParameterMode
from .system import System


class ParameterType(Enum):
    READ = "read"
    WRITE = "write"


def check_address(system: System, address: int) -> int:
    """Return address if it names a memory cell, else raise AddressOutOfRange."""
    if not 0 <= address < system.memory_len():
        raise AddressOutOfRange(address)
    return address


def resolve(
    system: System,
    param_types: Sequence[ParameterType],
    read_modes: Sequence[ParameterMode],
) -> Tuple[List[int], List[int]]:
    """
    Resolve the parameters of the instruction at the current instruction pointer.

    Args:
        system: The system whose memory holds the instruction
        param_types: Read/write type of each parameter, in order
        read_modes: One mode per READ parameter, in order

    Returns:
        Tuple of (read_values, write_addresses)

    Raises:
        ReadModeMismatch: If read_modes doesn't match the READ parameters
        NotEnoughParameters: If the instruction runs past the end of memory
        AddressOutOfRange: If a position read or a write target is outside memory
    """
    read_count = sum(1 for ty in param_types if ty == ParameterType.READ)
    if read_count != len(read_modes):
        raise ReadModeMismatch(read_count, len(read_modes))

    address = system.read_instruction_pointer()
    if address + 1 + len(param_types) > system.memory_len():
        raise NotEnoughParameters(system.memory_len() - 1)

    modes = iter(read_modes)
    read_values: List[int] = []
    write_addresses: List[int] = []
    for index, ty in enumerate(param_types, start=address + 1):
        raw = system.read_memory(index)
        match ty:
            case ParameterType.READ:
                match next(modes):
                    case ParameterMode.POSITION:
                        read_values.append(system.read_memory(check_address(system, raw)))
                    case ParameterMode.IMMEDIATE:
                        read_values.append(raw)
            case ParameterType.WRITE:
                write_addresses.append(check_address(system, raw))

    return read_values, write_addresses
