"""
Invariant fuzzer for the intcode VM.

Generates random programs and runs each one under a step budget, checking
that every run ends in a well-defined way:
- the VM either halts, fails with an IntcodeError, or exhausts the budget
- a failure carries the address of an instruction inside memory
- memory never changes length and the instruction pointer never leaves
  [0, len(memory)]

Anything else (an unexpected exception type, a broken invariant) is
reported as a bug.
"""

from dataclasses import dataclass
import random
from typing import Callable, List, Optional, Tuple

from intcode.errors import IntcodeError, InvalidOpcode, InvalidParameterMode
from intcode.io import CollectOutput
from intcode.opcode import OP_HALT, INT64_MAX, INT64_MIN, encode, instruction_size, parse
from intcode.program import Program, RunState
from .enumeration import enumerate_opcodes


# =============================================================================
# Configuration Constants
# =============================================================================

# Structure-aware generation probabilities
PROB_VALID_OPCODE = 0.85
PROB_RANDOM_CELL = 0.10
# Remaining probability: an explicit Halt

PROB_IN_RANGE_OPERAND = 0.80

# Mixed strategy: chance of picking the random generator
PROB_RANDOM_STRATEGY = 0.5

# Values fed to Store instructions
INPUT_VALUES = [0, 1, -1, 7, 8, 1000]


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration for program generators."""
    max_length: int = 20              # For random generator
    max_instructions: int = 10        # For structured generator
    max_steps: int = 1000             # Step budget per run


DEFAULT_CONFIG = GeneratorConfig()

VALID_OPCODES = list(enumerate_opcodes())


# =============================================================================
# Program Generators
# =============================================================================

def generate_random_program(max_length: int = DEFAULT_CONFIG.max_length) -> List[int]:
    """Generate completely random cells - no structure consideration."""
    length = random.randint(1, max_length)
    pool = [*range(-2, 12), 99, 101, 1001, 1101, 1105, 1106, 1107, 201, 2001]
    return [random.choice(pool) for _ in range(length)]


def random_operand(length: int) -> int:
    if random.random() < PROB_IN_RANGE_OPERAND:
        return random.randint(0, max(length - 1, 0))
    return random.choice([-1, length, length + 1, 5555, INT64_MAX, INT64_MIN])


def generate_structured_program(max_instructions: int = DEFAULT_CONFIG.max_instructions) -> List[int]:
    """
    Generate structure-aware programs with optional invalid cells.

    Emits encoded instructions with mostly in-range operands, so most
    instructions decode and resolve, but can still produce invalid opcodes,
    out-of-range addresses and truncated instructions to exercise error
    handling.

    Args:
        max_instructions: Maximum number of instructions to generate

    Returns:
        A program that may or may not run to completion
    """
    cells: List[int] = []
    num_instructions = random.randint(1, max_instructions)

    for _ in range(num_instructions):
        roll = random.random()
        if roll < PROB_VALID_OPCODE:
            opcode = random.choice(VALID_OPCODES)
            cells.append(encode(opcode))
        elif roll < PROB_VALID_OPCODE + PROB_RANDOM_CELL:
            cells.append(random.randint(-10, 30000))
        else:
            cells.append(OP_HALT)

    # Operands are picked once the final length is known
    layout: List[Tuple[int, int]] = []
    for cell in cells:
        try:
            size = instruction_size(parse(cell))
        except (InvalidOpcode, InvalidParameterMode):
            size = 1
        layout.append((cell, size - 1))

    length = sum(1 + n for _, n in layout)
    # Truncate the last instruction sometimes
    if random.random() < 0.05 and layout[-1][1] > 0:
        cell, n = layout[-1]
        drop = random.randint(1, n)
        layout[-1] = (cell, n - drop)
        length -= drop

    memory: List[int] = []
    for cell, n in layout:
        memory.append(cell)
        memory.extend(random_operand(length) for _ in range(n))
    return memory


def generate_mixed_strategy_program(max_instructions: int = DEFAULT_CONFIG.max_instructions) -> List[int]:
    """
    Generate a program using a mixed strategy, randomly selecting between
    completely random cells and structure-aware programs.
    """
    if random.random() < PROB_RANDOM_STRATEGY:
        return generate_random_program()
    return generate_structured_program(max_instructions=max_instructions)


# Generator registry for dispatch
GENERATORS: dict[str, Callable[[], List[int]]] = {
    "random": generate_random_program,
    "structured": generate_structured_program,
    "mixed": generate_mixed_strategy_program,
}


# =============================================================================
# Execution Results
# =============================================================================

@dataclass(frozen=True)
class ExecutionResult:
    """Base class for execution results - used as a union type."""


@dataclass(frozen=True)
class Halted(ExecutionResult):
    memory: Tuple[int, ...]
    outputs: Tuple[int, ...]


@dataclass(frozen=True)
class Failed(ExecutionResult):
    kind: str
    address: Optional[int]


@dataclass(frozen=True)
class Timeout(ExecutionResult):
    steps: int


@dataclass(frozen=True)
class Crash(ExecutionResult):
    reason: str


def run_program(memory: List[int], max_steps: int = DEFAULT_CONFIG.max_steps) -> ExecutionResult:
    """
    Run a program under a step budget and classify the outcome.

    Store instructions are fed from INPUT_VALUES, cycling; Print output is
    collected.
    """
    inputs = iter(INPUT_VALUES * (max_steps // len(INPUT_VALUES) + 1))
    output = CollectOutput()
    program = Program(memory, input_func=lambda: next(inputs), output_func=output)

    try:
        for _ in range(max_steps):
            if program.finished:
                break
            program.step()
            if not 0 <= program.instruction_pointer <= len(program.memory):
                return Crash(f"instruction pointer escaped: {program.instruction_pointer}")
    except IntcodeError as e:
        return Failed(type(e).__name__, e.address)
    except Exception as e:
        return Crash(f"VM raised unexpected exception: {e!r}")

    if program.state is RunState.RUNNING:
        return Timeout(max_steps)
    return Halted(tuple(program.memory), tuple(output.values))


def check_invariants(memory: List[int], result: ExecutionResult) -> Optional[str]:
    """
    Check a run's result against the VM's invariants.

    Returns:
        None if the result is well-formed, else a description of the violation
    """
    match result:
        case Crash(reason=reason):
            return reason
        case Failed(address=None):
            return "failure carries no address"
        case Failed(address=address) if not 0 <= address < len(memory):
            return f"failure address {address} outside memory"
        case Halted(memory=final) if len(final) != len(memory):
            return f"memory length changed from {len(memory)} to {len(final)}"
        case _:
            return None


# =============================================================================
# Statistics Tracking
# =============================================================================

@dataclass
class FuzzingStatistics:
    """Tracks fuzzing run statistics."""
    total_tests: int = 0
    halted: int = 0
    failed: int = 0
    timeouts: int = 0
    bugs_found: int = 0

    @property
    def correct_tests(self) -> int:
        return self.total_tests - self.bugs_found

    @property
    def bug_rate(self) -> float:
        return (self.bugs_found / self.total_tests * 100) if self.total_tests > 0 else 0.0

    def record_test(self, result: ExecutionResult, violation: Optional[str]) -> None:
        """Record results of a single test."""
        self.total_tests += 1

        if isinstance(result, Halted):
            self.halted += 1
        elif isinstance(result, Failed):
            self.failed += 1
        elif isinstance(result, Timeout):
            self.timeouts += 1

        if violation is not None:
            self.bugs_found += 1

    def print_summary(self) -> None:
        """Print formatted summary of results."""
        print("\n" + "=" * 60)
        print("Fuzzer Summary")
        print("-" * 40)
        print(f"Total tests run:           {self.total_tests}")
        print(f"Halted:                    {self.halted}")
        print(f"Failed with VM error:      {self.failed}")
        print(f"Step budget exhausted:     {self.timeouts}")
        print(f"Bugs found:                {self.bugs_found}")
        print(f"Correct:                   {self.correct_tests}")

        if self.bugs_found > 0:
            print(f"Bug detection rate:     {self.bug_rate:.1f}%")
        else:
            print("\nNo bugs detected!")


# =============================================================================
# Bug Reporting
# =============================================================================

def report_bug(test_num: int, memory: List[int], result: ExecutionResult, violation: str) -> None:
    """Print detailed bug report."""
    print(f"\nTest {test_num}: Bug found")
    print(f"  Program:   {','.join(str(v) for v in memory)}")
    print(f"  Result:    {result}")
    print(f"  Violation: {violation}")


def print_header(num_tests: int, generator: str) -> None:
    """Print fuzzer run header."""
    print(f"Intcode Fuzzer - Running {num_tests} tests")
    print(f"Generator: {generator}")
    print("=" * 60)


# =============================================================================
# Fuzzer Main Logic
# =============================================================================

def run_fuzzer(
    num_tests: int = 1000,
    seed: Optional[int] = None,
    generator: str = "mixed",
    max_steps: int = DEFAULT_CONFIG.max_steps,
    verbose: bool = True,
) -> FuzzingStatistics:
    """
    Run the fuzzer for a specified number of tests.

    Args:
        num_tests: Number of random programs to generate
        seed: Random seed for reproducibility
        generator: Generator type: "random", "structured" or "mixed"
        max_steps: Step budget per program
        verbose: Print the header, bug reports and summary

    Returns:
        FuzzingStatistics object with results
    """
    if seed is not None:
        random.seed(seed)

    generator_func = GENERATORS.get(generator, generate_random_program)
    stats = FuzzingStatistics()

    if verbose:
        print_header(num_tests, generator)

    for i in range(num_tests):
        memory = generator_func()
        result = run_program(memory, max_steps=max_steps)
        violation = check_invariants(memory, result)
        stats.record_test(result, violation)

        if violation is not None and verbose:
            report_bug(i + 1, memory, result, violation)

    if verbose:
        stats.print_summary()
    return stats


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Invariant fuzzer for the intcode VM")
    parser.add_argument(
        "-n", "--num-tests",
        type=int,
        default=1000,
        help="Number of random programs to run (default: 1000)"
    )
    parser.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility"
    )
    parser.add_argument(
        "-g", "--generator",
        type=str,
        default="mixed",
        choices=sorted(GENERATORS),
        help="Generator type (default: %(default)s)"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULT_CONFIG.max_steps,
        help="Step budget per program (default: %(default)s)"
    )

    args = parser.parse_args()

    run_fuzzer(
        num_tests=args.num_tests,
        seed=args.seed,
        generator=args.generator,
        max_steps=args.max_steps,
    )
