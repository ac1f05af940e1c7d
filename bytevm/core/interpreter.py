from typing import Dict, List, Optional, Union

import structlog

from .errors import ArithmeticOverflow, ExecutionError, InvalidJumpTarget, StackUnderflow, UndefinedVariable
from .instruction import Instruction, JumpInstruction, Opcode, Program
from ..utils.arith import OverflowPolicy, vm_add, vm_eq, vm_mul

logger = structlog.get_logger(__name__)


class Interpreter:
    """
    Stack-based bytecode interpreter.

    Owns an operand stack and a variable table. Both persist across calls to
    `execute` on the same instance, including after a failed run; use a new
    instance (or `reset`) for an isolated run. Not thread-safe.

    Nothing is logged unless `trace` is set; then run boundaries and every
    executed instruction are logged at debug.
    """

    def __init__(self, overflow: Union[OverflowPolicy, str] = OverflowPolicy.WRAP, trace: bool = False):
        self.stack: List[int] = []
        self.variables: Dict[str, int] = {}
        self.overflow = OverflowPolicy(overflow)
        self.trace = trace

    def reset(self) -> None:
        """Drop all stack values and variables."""
        self.stack.clear()
        self.variables.clear()

    def push(self, value: int) -> None:
        self.stack.append(value)

    def pop(self, pc: Optional[int] = None, instruction: Optional[Instruction] = None) -> int:
        if not self.stack:
            raise StackUnderflow(pc, instruction)
        return self.stack.pop()

    def execute(self, program: Program) -> Optional[int]:
        """
        Run `program` from position 0.

        Returns the value popped by the first ReturnValue, or None when the
        program counter runs past the last instruction. Raises an
        ExecutionError subclass on failure; stack and variable changes made
        before the failure are kept.
        """
        length = len(program)
        if self.trace:
            logger.debug("Executing program", length=length, stack_depth=len(self.stack))
        pc = 0
        while pc < length:
            instr = program[pc]
            if self.trace:
                logger.debug("Step", pc=pc, instruction=str(instr), stack=list(self.stack))
            try:
                if instr.opcode is Opcode.RETURN_VALUE:
                    value = self.pop(pc, instr)
                    if self.trace:
                        logger.debug("Program returned", pc=pc, value=value)
                    return value
                pc = self._step(instr, pc, length)
            except ExecutionError as e:
                if self.trace:
                    logger.debug("Execution halted", pc=pc, opcode=instr.opcode.value, error=str(e))
                raise

        if self.trace:
            logger.debug("Program finished without returning", pc=pc)
        return None

    def _step(self, instr: Instruction, pc: int, length: int) -> int:
        """Execute one non-returning instruction and return the next program counter."""
        opcode = instr.opcode

        if opcode is Opcode.LOAD_VAL:
            self.push(instr.value)
        elif opcode is Opcode.WRITE_VAR:
            self.variables[instr.name] = self.pop(pc, instr)
        elif opcode is Opcode.READ_VAR:
            if instr.name not in self.variables:
                raise UndefinedVariable(instr.name, pc, instr)
            self.push(self.variables[instr.name])
        elif opcode is Opcode.ADD:
            a = self.pop(pc, instr)
            b = self.pop(pc, instr)
            self.push(self._arith(vm_add, a, b, pc, instr))
        elif opcode is Opcode.MULTIPLY:
            a = self.pop(pc, instr)
            b = self.pop(pc, instr)
            self.push(self._arith(vm_mul, a, b, pc, instr))
        elif opcode is Opcode.CMP_EQ:
            a = self.pop(pc, instr)
            b = self.pop(pc, instr)
            self.push(vm_eq(a, b))
        elif opcode is Opcode.JUMP_IF_FALSE:
            condition = self.pop(pc, instr)
            if condition == 0:
                return self._jump(instr, pc, length)
        elif opcode is Opcode.GOTO:
            return self._jump(instr, pc, length)
        else:
            raise TypeError(f"Unsupported instruction at pc={pc}: {instr!r}")

        return pc + 1

    def _arith(self, op, a: int, b: int, pc: int, instr: Instruction) -> int:
        try:
            return op(a, b, self.overflow)
        except OverflowError:
            # Only reachable under TRAP; operands are already consumed
            exact = a + b if instr.opcode is Opcode.ADD else a * b
            raise ArithmeticOverflow(exact, pc, instr) from None

    @staticmethod
    def _jump(instr: JumpInstruction, pc: int, length: int) -> int:
        # Jumping to `length` is a valid way to end the run
        if instr.target > length:
            raise InvalidJumpTarget(instr.target, length, pc, instr)
        return instr.target
