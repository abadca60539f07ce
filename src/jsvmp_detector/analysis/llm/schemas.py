"""Pydantic models for validated JSVMP detection output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from jsvmp_detector.constants import (
    BytecodePatternType,
    ConfidenceLevel,
    DetectionType,
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class VMComponentVariable(_Frozen):
    """One VM "register" role; ``variable_name=None`` means not identified."""

    variable_name: str | None = None
    line_number: int | None = None
    source_line: int | None = None
    source_column: int | None = None
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    reasoning: str = ""


class LoopEntryInjection(_Frozen):
    """Inside the dispatcher loop, before the opcode read."""

    line_number: int
    source_line: int | None = None
    source_column: int | None = None
    description: str = ""


class BreakpointInjection(_Frozen):
    """The opcode-fetch statement of a dispatcher."""

    line_number: int
    source_line: int | None = None
    source_column: int | None = None
    opcode_read_pattern: str | None = None
    description: str = ""


class VMComponents(_Frozen):
    instruction_pointer: VMComponentVariable
    stack_pointer: VMComponentVariable
    virtual_stack: VMComponentVariable
    bytecode_array: VMComponentVariable
    loop_entry: LoopEntryInjection | None = None
    breakpoint: BreakpointInjection | None = None


class DebuggingEntryPoint(_Frozen):
    """Legacy single breakpoint suggestion."""

    line_number: int
    description: str = ""


class GlobalBytecodeInfo(_Frozen):
    """The master bytecode array shared by several VM regions."""

    variable_name: str | None = None
    definition_line: int | None = None
    source_line: int | None = None
    source_column: int | None = None
    pattern_type: BytecodePatternType | None = None
    local_bytecode_var: str | None = None
    transform_expression: str | None = None
    structure_description: str | None = None
    description: str = ""


class DetectionRegion(_Frozen):
    """A claimed line range (beautified coordinates) holding one JSVMP."""

    start: int
    end: int
    type: DetectionType
    confidence: ConfidenceLevel
    description: str
    vm_components: VMComponents | None = None
    debugging_entry_point: DebuggingEntryPoint | None = None

    def overlaps(self, other: DetectionRegion) -> bool:
        """Any shared line counts, including a single touching line."""
        return self.start <= other.end and self.end >= other.start


class DetectionSummary(_Frozen):
    overall_description: str
    debugging_recommendation: str


class DetectionResult(_Frozen):
    """Validated model output for one batch, or the merged whole file."""

    summary: str | DetectionSummary
    global_bytecode: GlobalBytecodeInfo | None = None
    regions: list[DetectionRegion] = Field(
        default_factory=lambda: list[DetectionRegion]()
    )

    @property
    def summary_text(self) -> str:
        if isinstance(self.summary, str):
            return self.summary
        return self.summary.overall_description
