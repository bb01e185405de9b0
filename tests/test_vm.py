# =============================================================================
# test_vm.py - Stack Machine Tests
# =============================================================================
# Executes compiled programs on the reference stack machine and checks the
# frame contract: cells are reserved up front and declaration pushes land
# in their own offsets.
# =============================================================================

import pytest

from plc0.compiler import compile_source
from plc0.errors import ExecutionError
from plc0.instruction import Instruction, Operation
from plc0.vm import StackMachine, find_prologue, run_program, wrap32


def run(source: str) -> list[int]:
    return run_program(compile_source(source))


class TestPrograms:
    """Run complete programs."""

    def test_const_var_assign_print(self):
        assert run("begin const c = 5; var x; x = c + 1; print(x); end") == [6]

    def test_initializer_without_store(self):
        assert run("begin var y = -3; print(y); end") == [-3]

    def test_mixed_declarations(self):
        source = """
        begin
            const a = 10;
            var b = 4;
            var c;
            c = a * b - 2;
            print(c);
            print(a / b);
        end
        """
        assert run(source) == [38, 2]

    def test_several_initialized_declarations(self):
        source = "begin const k = 3; var a = k * 2; var b = a + k; print(b - a); end"
        assert run(source) == [3]

    def test_no_output(self):
        assert run("begin var a = 1; end") == []

    def test_uninitialized_variables_keep_their_values(self):
        """Temporaries live above the frame, never in a variable's cell."""
        source = "begin var x; var y; x = 1; y = 2; print(x); print(y); end"
        assert run(source) == [1, 2]

    def test_initialized_then_uninitialized(self):
        source = "begin const k = 4; var a = k * k; var b; b = a - k; print(b); print(a); end"
        assert run(source) == [12, 16]

    def test_misaligned_declarations_are_rejected(self):
        """
        A variable without an initializer before an initialized one leaves
        the pushed value in the wrong cell; the machine refuses to go on.
        """
        result = compile_source("begin var x; var y = 1; print(y); end")
        with pytest.raises(ExecutionError) as exc_info:
            run_program(result)
        assert exc_info.value.pc == result.prologue_length == 1


class TestArithmetic:
    """Integer semantics of the machine."""

    @pytest.mark.parametrize("expr,value", [
        ("7 / 2", 3),
        ("-7 / 2", -3),
        ("7 / -2", -3),
        ("-7 / -2", 3),
        ("2 - 5", -3),
        ("6 * -7", -42),
    ])
    def test_operations(self, expr, value):
        assert run(f"begin print({expr}); end") == [value]

    def test_wraparound(self):
        assert run("begin print(2147483647 + 1); end") == [-2147483648]
        assert wrap32(2**32 + 5) == 5

    def test_division_by_zero(self):
        with pytest.raises(ExecutionError) as exc_info:
            run("begin print(1 / 0); end")
        assert exc_info.value.pc == 2


class TestMachine:
    """Failures and hooks of the machine itself."""

    def test_stack_underflow(self):
        with pytest.raises(ExecutionError):
            StackMachine([Instruction(Operation.ADD)], 0).run()

    def test_undefined_cell(self):
        machine = StackMachine([Instruction(Operation.LOD, 0)], 1)
        with pytest.raises(ExecutionError):
            machine.run()

    def test_cell_outside_storage(self):
        program = [Instruction(Operation.LIT, 1), Instruction(Operation.STO, 5)]
        with pytest.raises(ExecutionError):
            StackMachine(program, 1).run()

    def test_output_callback(self):
        seen = []
        program = [
            Instruction(Operation.LIT, 4),
            Instruction(Operation.WRT),
            Instruction(Operation.LIT, 9),
            Instruction(Operation.WRT),
        ]
        assert StackMachine(program, 0, output=seen.append).run() == [4, 9]
        assert seen == [4, 9]

    def test_frame_is_reserved_before_execution(self):
        machine = StackMachine([], 3)
        assert machine.stack == [None, None, None]
        assert machine.sp == 0

    def test_temporaries_never_touch_the_frame(self):
        program = [
            Instruction(Operation.LIT, 2),
            Instruction(Operation.LIT, 3),
            Instruction(Operation.ADD),
            Instruction(Operation.STO, 1),
            Instruction(Operation.LOD, 1),
            Instruction(Operation.WRT),
        ]
        machine = StackMachine(program, 2)
        assert machine.run() == [5]
        assert machine.stack[:2] == [None, 5]

    def test_body_cannot_pop_frame_cells(self):
        program = [Instruction(Operation.LIT, 1), Instruction(Operation.WRT), Instruction(Operation.WRT)]
        with pytest.raises(ExecutionError) as exc_info:
            StackMachine(program, 1, prologue_length=0).run()
        assert exc_info.value.pc == 2


class TestPrologue:
    """Locate the declaration prologue of an instruction list."""

    def test_compiled_length_matches_inferred(self):
        source = "begin const k = 3; var a = k * 2; var b; b = -a; print(b + k); end"
        result = compile_source(source)
        assert result.prologue_length == 4
        assert result.initializer_offsets == (0, 1)
        assert find_prologue(result.instructions) == result.prologue_length

    def test_negated_initializer(self):
        result = compile_source("begin var y = -3; print(y); end")
        assert find_prologue(result.instructions) == result.prologue_length == 3

    def test_no_declarations(self):
        result = compile_source("begin print(1 + 2); end")
        assert result.prologue_length == 0
        assert find_prologue(result.instructions) == 0

    def test_no_statements(self):
        result = compile_source("begin const a = 1; var b = a; end")
        assert find_prologue(result.instructions) == result.prologue_length == 2
