"""Fuzzing and exhaustive enumeration for the intcode VM."""

from .fuzzer import (
    ExecutionResult, Halted, Failed, Timeout, Crash,
    FuzzingStatistics,
    GeneratorConfig,
    check_invariants,
    run_program,
    run_fuzzer,
)

from .enumeration import (
    BOUNDARY_CELLS,
    enumerate_opcode_cells,
    enumerate_opcodes,
    enumerate_instruction_programs,
    enumerate_truncated_programs,
    generate_comprehensive_suite,
)
