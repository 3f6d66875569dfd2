"""Tests for the Program VM and its run loop."""

import io

import pytest

from intcode.errors import (
    AddressOutOfRange, InputError, IntcodeError, InvalidOpcode,
    InvalidParameterMode, MissingHalt, NotEnoughParameters, OutputError,
)
from intcode.io import CollectOutput, QueueInput
from intcode.opcode import INT64_MAX, INT64_MIN
from intcode.program import Program, RunState, run_program


def unreachable_input():
    raise AssertionError("input should not be requested")


def unreachable_output(value):
    raise AssertionError(f"output should not be emitted: {value}")


def run(memory, inputs=None, require_halt=False):
    """Run memory to completion, returning (program, outputs)."""
    program = Program(memory, require_halt=require_halt)
    output = CollectOutput()
    input_func = QueueInput(inputs) if inputs is not None else unreachable_input
    program.run_with_io(input_func, output)
    return program, output.values


def run_failing(memory, error_type, inputs=None, require_halt=False):
    """Run memory expecting error_type, returning (program, error)."""
    program = Program(memory, require_halt=require_halt)
    input_func = QueueInput(inputs) if inputs is not None else unreachable_input
    with pytest.raises(error_type) as exc_info:
        program.run_with_io(input_func, unreachable_output)
    assert program.state is RunState.FAILED
    assert program.error is exc_info.value
    return program, exc_info.value


# ============================================================
# Construction
# ============================================================

def test_initializes_program_with_memory():
    memory = [1, 2, 3]
    program = Program(memory)
    assert program.memory == memory
    assert program.instruction_pointer == 0
    assert program.state is RunState.RUNNING


def test_memory_is_copied_not_aliased():
    memory = [1, 0, 0, 0, 99]
    program, _ = run(memory)
    assert program.memory == [2, 0, 0, 0, 99]
    assert memory == [1, 0, 0, 0, 99]


@pytest.mark.parametrize("memory", [
    [1, INT64_MAX + 1],
    [INT64_MIN - 1],
    [1, "2"],
    [1, 2.0],
    [True],
])
def test_rejects_cells_outside_int64(memory):
    with pytest.raises(ValueError):
        Program(memory)


def test_runs_an_empty_program():
    program = Program([])
    assert program.state is RunState.HALTED
    program.run_with_io(unreachable_input, unreachable_output)
    assert program.memory == []


# ============================================================
# Arithmetic
# ============================================================

@pytest.mark.parametrize("memory, expected", [
    ([1, 9, 10, 3, 2, 3, 11, 0, 99, 30, 40, 50], [3500, 9, 10, 70, 2, 3, 11, 0, 99, 30, 40, 50]),
    ([1, 0, 0, 0, 99], [2, 0, 0, 0, 99]),
    ([2, 3, 0, 3, 99], [2, 3, 0, 6, 99]),
    ([2, 4, 4, 5, 99, 0], [2, 4, 4, 5, 99, 9801]),
    ([1, 1, 1, 4, 99, 5, 6, 0, 99], [30, 1, 1, 4, 2, 5, 6, 0, 99]),
])
def test_runs_known_programs(memory, expected):
    program, outputs = run(memory)
    assert program.state is RunState.HALTED
    assert program.memory == expected
    assert outputs == []


@pytest.mark.parametrize("memory, expected", [
    ([1, 5, 6, 0, 99, 10, 20], [30, 5, 6, 0, 99, 10, 20]),
    ([101, 10, 5, 0, 99, 20], [30, 10, 5, 0, 99, 20]),
    ([1001, 5, 20, 0, 99, 10], [30, 5, 20, 0, 99, 10]),
    ([1101, 10, 20, 0], [30, 10, 20, 0]),
    ([1101, 100, -1, 0], [99, 100, -1, 0]),
    ([2, 5, 6, 0, 99, 10, 20], [200, 5, 6, 0, 99, 10, 20]),
    ([102, 10, 5, 0, 99, 20], [200, 10, 5, 0, 99, 20]),
    ([1002, 5, 20, 0, 99, 10], [200, 5, 20, 0, 99, 10]),
    ([1102, 10, 20, 0], [200, 10, 20, 0]),
])
def test_arithmetic_in_every_mode(memory, expected):
    program, _ = run(memory)
    assert program.memory == expected


def test_arithmetic_wraps_to_int64():
    program, _ = run([1101, INT64_MAX, 1, 0])
    assert program.memory[0] == INT64_MIN

    program, _ = run([1102, 1 << 62, 4, 0])
    assert program.memory[0] == 0

    program, _ = run([1102, INT64_MIN, -1, 0])
    assert program.memory[0] == INT64_MIN


# ============================================================
# Halting
# ============================================================

def test_understands_halt():
    program, _ = run([99, 1101, 10, 20, 0])
    assert program.memory == [99, 1101, 10, 20, 0]
    assert program.state is RunState.HALTED
    assert program.instruction_pointer == 0


def test_running_off_the_end_is_an_implicit_halt():
    program, _ = run([1101, 10, 20, 0])
    assert program.state is RunState.HALTED
    assert program.instruction_pointer == 4


def test_require_halt_rejects_running_off_the_end():
    program, err = run_failing([1101, 1, 1, 0], MissingHalt, require_halt=True)
    assert err.address == 0
    assert program.memory == [2, 1, 1, 0]


def test_require_halt_accepts_explicit_halt():
    program, _ = run([1101, 1, 1, 0, 99], require_halt=True)
    assert program.memory == [2, 1, 1, 0, 99]


def test_finished_program_cannot_be_resumed():
    program, _ = run([99])
    with pytest.raises(RuntimeError):
        program.step()

    program, _ = run_failing([5555], InvalidOpcode)
    with pytest.raises(RuntimeError):
        program.step()


def test_step_reports_state():
    program = Program([1101, 1, 1, 5, 99, 0])
    assert program.step() is RunState.RUNNING
    assert program.instruction_pointer == 4
    assert program.step() is RunState.HALTED
    assert program.memory[5] == 2


# ============================================================
# Errors and address attribution
# ============================================================

def test_fails_to_run_program_with_invalid_opcode():
    program, err = run_failing([1, 5, 6, 7, 5555, 3, 7, 0], InvalidOpcode)
    assert err.address == 4
    # The addition before the bad opcode keeps its effect
    assert program.memory == [1, 5, 6, 7, 5555, 3, 7, 10]


def test_fails_on_invalid_parameter_mode():
    _, err = run_failing([1101, 1, 1, 0, 201, 0, 0, 0], InvalidParameterMode)
    assert err.address == 4
    assert err.offset == 0


@pytest.mark.parametrize("memory", [
    [1, 5555, 6, 7, 99, 3, 7, 0],
    [1, 5, 5555, 7, 99, 3, 7, 0],
    [1, 5, 6, 5555, 99, 3, 7, 0],
    [2, 5555, 6, 7, 99, 3, 7, 0],
    [2, 5, 5555, 7, 99, 3, 7, 0],
    [2, 5, 6, 5555, 99, 3, 7, 0],
])
def test_fails_when_a_position_is_out_of_range(memory):
    program, err = run_failing(memory, AddressOutOfRange)
    assert err.target == 5555
    assert err.address == 0
    assert program.memory == memory


def test_address_is_the_instruction_not_the_operand():
    _, err = run_failing([1101, 0, 0, 9, 1, 5555, 0, 0, 99, 0], AddressOutOfRange)
    assert err.target == 5555
    assert err.address == 4
    assert "at address 4" in str(err)


@pytest.mark.parametrize("memory", [[1, 5, 6], [2, 5, 6], [3], [4], [1105, 1]])
def test_fails_when_there_are_not_enough_parameters(memory):
    _, err = run_failing(memory, NotEnoughParameters, inputs=[])
    assert err.address == 0
    assert err.last_address == len(memory) - 1


def test_memory_before_failure_matches_truncated_run():
    failing = [1101, 2, 3, 13, 1002, 13, 10, 14, 1, 0, 5555, 0, 99, 0, 0]
    truncated = failing[:8] + [99] + failing[9:]

    expected, _ = run(truncated)
    program, err = run_failing(failing, AddressOutOfRange)
    assert err.address == 8
    assert program.memory[:8] == expected.memory[:8]
    assert program.memory[9:] == expected.memory[9:]
    assert program.memory[13:] == [5, 50]


# ============================================================
# Input and output
# ============================================================

def test_understands_store():
    program, _ = run([3, 3, 99, 0], inputs=[77])
    assert program.memory == [3, 3, 99, 77]


def test_store_fails_when_output_position_is_out_of_range():
    calls = []

    def counting_input():
        calls.append(1)
        return 0

    program = Program([3, 5555])
    with pytest.raises(AddressOutOfRange) as exc_info:
        program.run_with_io(counting_input, unreachable_output)
    assert exc_info.value.address == 0
    assert calls == []


def test_store_fails_when_input_is_exhausted():
    program, err = run_failing([1101, 2, 3, 7, 3, 7, 99, 0], InputError, inputs=[])
    assert err.address == 4
    assert program.memory[7] == 5


def test_store_fails_without_input_source():
    program = Program([3, 0])
    with pytest.raises(InputError):
        program.run_with_io(None, None)


def test_store_rejects_non_integer_input():
    program = Program([3, 0])
    with pytest.raises(InputError):
        program.run_with_io(lambda: "5", unreachable_output)

    program = Program([3, 0])
    with pytest.raises(InputError):
        program.run_with_io(lambda: INT64_MAX + 1, unreachable_output)


def test_prints_when_parameter_is_in_position_mode():
    program, outputs = run([4, 3, 99, 77])
    assert outputs == [77]
    assert program.memory == [4, 3, 99, 77]
    assert program.state is RunState.HALTED


def test_prints_when_parameter_is_in_immediate_mode():
    program, outputs = run([104, 77])
    assert outputs == [77]
    assert program.memory == [104, 77]


def test_print_fails_when_input_position_is_out_of_range():
    _, err = run_failing([4, 5555], AddressOutOfRange)
    assert err.address == 0


def test_print_failure_surfaces_as_output_error():
    def broken_output(value):
        raise OutputError("sink closed")

    program = Program([104, 1, 104, 2, 99])
    with pytest.raises(OutputError) as exc_info:
        program.run_with_io(unreachable_input, broken_output)
    assert exc_info.value.address == 0


def test_input_callable_failure_becomes_input_error():
    program = Program([1101, 2, 3, 7, 3, 7, 99, 0])
    with pytest.raises(InputError) as exc_info:
        program.run_with_io(iter([]).__next__, unreachable_output)
    assert exc_info.value.address == 4
    assert isinstance(exc_info.value.__cause__, StopIteration)
    assert program.state is RunState.FAILED
    assert program.error is exc_info.value
    assert program.memory[7] == 5

    with pytest.raises(RuntimeError):
        program.step()
    program.run_with_io(lambda: 9, unreachable_output)
    assert program.state is RunState.FAILED
    assert program.memory[7] == 5


def test_output_callable_failure_becomes_output_error():
    def broken_pipe(value):
        raise BrokenPipeError("reader went away")

    program = Program([104, 1, 99])
    with pytest.raises(OutputError) as exc_info:
        program.run_with_io(unreachable_input, broken_pipe)
    assert exc_info.value.address == 0
    assert isinstance(exc_info.value.__cause__, OSError)
    assert program.state is RunState.FAILED

    with pytest.raises(RuntimeError):
        program.step()


def test_run_loop_moves_through_write_instruction_pointer():
    class RecordingProgram(Program):
        def __init__(self, memory):
            super().__init__(memory)
            self.jumps = []

        def write_instruction_pointer(self, value):
            self.jumps.append(value)
            super().write_instruction_pointer(value)

    program = RecordingProgram([1105, 1, 4, 99, 1101, 1, 1, 0, 99])
    program.run_with_io(unreachable_input, unreachable_output)
    assert program.jumps == [4, 8]
    assert program.memory[0] == 2
    assert exc_info.value.address == 0


def test_echo_program():
    _, outputs = run([3, 0, 4, 0, 99], inputs=[-42])
    assert outputs == [-42]


# ============================================================
# Jumps and comparisons
# ============================================================

@pytest.mark.parametrize("memory, expected", [
    # JumpIfTrue, both immediate
    ([1105, 1, 7, 1101, 5, 6, 8, 99, 0], [1105, 1, 7, 1101, 5, 6, 8, 99, 0]),
    ([1105, 0, 7, 1101, 5, 6, 8, 99, 0], [1105, 0, 7, 1101, 5, 6, 8, 99, 11]),
    # JumpIfTrue, both position
    ([5, 9, 10, 1101, 5, 6, 11, 99, 99, 1, 7, 0], [5, 9, 10, 1101, 5, 6, 11, 99, 99, 1, 7, 0]),
    ([5, 9, 10, 1101, 5, 6, 11, 99, 99, 0, 7, 0], [5, 9, 10, 1101, 5, 6, 11, 99, 99, 0, 7, 11]),
    # JumpIfTrue, mixed modes
    ([105, 1, 9, 1101, 5, 6, 10, 99, 99, 7, 0], [105, 1, 9, 1101, 5, 6, 10, 99, 99, 7, 0]),
    ([1005, 9, 7, 1101, 5, 6, 10, 99, 99, 1, 0], [1005, 9, 7, 1101, 5, 6, 10, 99, 99, 1, 0]),
    # JumpIfFalse, both immediate
    ([1106, 0, 7, 1101, 5, 6, 8, 99, 0], [1106, 0, 7, 1101, 5, 6, 8, 99, 0]),
    ([1106, 3, 7, 1101, 5, 6, 8, 99, 0], [1106, 3, 7, 1101, 5, 6, 8, 99, 11]),
    # JumpIfFalse, both position
    ([6, 9, 10, 1101, 5, 6, 11, 99, 99, 0, 7, 0], [6, 9, 10, 1101, 5, 6, 11, 99, 99, 0, 7, 0]),
    ([6, 9, 10, 1101, 5, 6, 11, 99, 99, -1, 7, 0], [6, 9, 10, 1101, 5, 6, 11, 99, 99, -1, 7, 11]),
    # LessThan
    ([1107, 3, 5, 5, 99, 0], [1107, 3, 5, 5, 99, 1]),
    ([1107, 5, 3, 5, 99, 7], [1107, 5, 3, 5, 99, 0]),
    ([1107, 4, 4, 5, 99, 7], [1107, 4, 4, 5, 99, 0]),
    ([7, 5, 6, 7, 99, -3, 2, 9], [7, 5, 6, 7, 99, -3, 2, 1]),
    ([107, -3, 5, 6, 99, -4, 9], [107, -3, 5, 6, 99, -4, 0]),
    ([1007, 5, 2, 6, 99, -4, 9], [1007, 5, 2, 6, 99, -4, 1]),
])
def test_jumps_and_comparisons(memory, expected):
    program, _ = run(memory)
    assert program.state is RunState.HALTED
    assert program.memory == expected


@pytest.mark.parametrize("program_text", [
    [3, 12, 6, 12, 15, 1, 13, 14, 13, 4, 13, 99, -1, 0, 1, 9],
    [3, 3, 1105, -1, 9, 1101, 0, 0, 12, 4, 12, 99, 1],
])
@pytest.mark.parametrize("value, expected", [(0, 0), (5, 1), (-5, 1)])
def test_jump_programs_report_whether_input_was_non_zero(program_text, value, expected):
    _, outputs = run(program_text, inputs=[value])
    assert outputs == [expected]


def test_jump_to_end_of_memory_halts():
    program, _ = run([1105, 1, 3])
    assert program.state is RunState.HALTED
    assert program.instruction_pointer == 3


@pytest.mark.parametrize("target", [4, 5555, -1])
def test_jump_out_of_range_fails_at_the_jump(target):
    program, err = run_failing([1105, 1, target], AddressOutOfRange)
    assert err.target == target
    assert err.address == 0
    assert program.instruction_pointer == 0


def test_jump_loop_counts_down():
    # Print the counter, subtract one, loop while non-zero
    memory = [4, 13, 1001, 13, -1, 13, 1005, 13, 0, 99, 0, 0, 0, 3]
    _, outputs = run(memory)
    assert outputs == [3, 2, 1]


# ============================================================
# Default I/O and helpers
# ============================================================

def test_run_uses_line_input_and_decimal_output():
    output = io.StringIO()
    Program([3, 0, 4, 0, 104, -7, 99]).run(io.StringIO("42\n"), output)
    assert output.getvalue() == "42-7"


def test_run_rejects_non_decimal_input():
    program = Program([3, 0, 99])
    with pytest.raises(InputError) as exc_info:
        program.run(io.StringIO("forty-two\n"), io.StringIO())
    assert exc_info.value.address == 0
    assert "forty-two" in str(exc_info.value)


def test_run_program_helper():
    output = CollectOutput()
    program = run_program([3, 0, 4, 0, 99], QueueInput([9]), output)
    assert program.memory == [9, 0, 4, 0, 99]
    assert output.values == [9]


def test_errors_share_a_base_class():
    for error_type in (AddressOutOfRange, InputError, InvalidOpcode, MissingHalt,
                       NotEnoughParameters, OutputError, InvalidParameterMode):
        assert issubclass(error_type, IntcodeError)


def test_independent_programs_do_not_share_memory():
    memory = [1101, 1, 1, 0]
    first, _ = run(memory)
    second = Program(memory)
    assert first.memory == [2, 1, 1, 0]
    assert second.memory == [1101, 1, 1, 0]
