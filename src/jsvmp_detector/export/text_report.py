"""Plain-text detection report, the format returned by the MCP tool."""

from __future__ import annotations

from jsvmp_detector.analysis.llm.schemas import (
    DetectionRegion,
    DetectionResult,
    DetectionSummary,
    GlobalBytecodeInfo,
    VMComponents,
)

NO_REGIONS_MESSAGE = "No JSVMP dispatcher patterns detected."

_ROLE_LABELS = (
    ("instruction_pointer", "Instruction Pointer"),
    ("stack_pointer", "Stack Pointer"),
    ("virtual_stack", "Virtual Stack"),
    ("bytecode_array", "Bytecode Array"),
)


def format_source_loc(
    source_line: int | None, source_column: int | None
) -> str:
    """`` [Src L{line}:{column}]`` when both are known, else empty."""
    if source_line is not None and source_column is not None:
        return f" [Src L{source_line}:{source_column}]"
    return ""


def _plural(count: int, word: str, suffix: str) -> str:
    return f"{count} {word}{suffix if count > 1 else ''}"


def format_detection_report(
    result: DetectionResult,
    file_path: str,
    total_lines: int,
    batch_count: int,
) -> str:
    """Render a merged result as a multi-section text report."""
    lines: list[str] = [
        "=== JSVMP Dispatcher Detection Result ===",
        f"File: {file_path} ({total_lines} lines, "
        f"{_plural(batch_count, 'batch', 'es')})",
        "",
    ]

    if isinstance(result.summary, DetectionSummary):
        lines.append(f"Summary: {result.summary.overall_description}")
        lines.append(
            f"Recommendation: {result.summary.debugging_recommendation}"
        )
    else:
        lines.append(f"Summary: {result.summary}")
    lines.append("")

    if result.global_bytecode is not None:
        lines.extend(_global_bytecode_lines(result.global_bytecode))
        lines.append("")

    if not result.regions:
        lines.append(NO_REGIONS_MESSAGE)
        return "\n".join(lines)

    lines.append(
        f"Detected Regions "
        f"({_plural(len(result.regions), 'JSVMP instance', 's')}):"
    )
    lines.append("")
    for index, region in enumerate(result.regions):
        lines.extend(_region_lines(index, region))
        lines.append("")

    return "\n".join(lines)


def _global_bytecode_lines(gb: GlobalBytecodeInfo) -> list[str]:
    lines = ["Global Bytecode:"]
    if gb.variable_name:
        loc = format_source_loc(gb.source_line, gb.source_column)
        lines.append(
            f"  Variable: {gb.variable_name} "
            f"(line {gb.definition_line}){loc}"
        )
    if gb.pattern_type:
        lines.append(f"  Pattern: {gb.pattern_type}")
    if gb.local_bytecode_var:
        lines.append(f"  Local Bytecode Var: {gb.local_bytecode_var}")
    if gb.transform_expression:
        lines.append(f"  Transform: {gb.transform_expression}")
    if gb.structure_description:
        lines.append(f"  Structure: {gb.structure_description}")
    if gb.description:
        lines.append(f"  {gb.description}")
    return lines


def _region_lines(index: int, region: DetectionRegion) -> list[str]:
    lines = [
        f"--- Instance {index + 1} ---",
        f"[{region.confidence}] Lines {region.start}-{region.end}: "
        f"{region.type}",
        f"  {region.description}",
    ]
    if region.vm_components is not None:
        lines.extend(_vm_component_lines(region.vm_components))

    has_breakpoint = (
        region.vm_components is not None
        and region.vm_components.breakpoint is not None
    )
    entry = region.debugging_entry_point
    if entry is not None and not has_breakpoint:
        lines.append(f"  Debugging Entry Point: Line {entry.line_number}")
        lines.append(f"    {entry.description}")
    return lines


def _vm_component_lines(vm: VMComponents) -> list[str]:
    lines = ["  VM Components:"]
    for attr, label in _ROLE_LABELS:
        role = getattr(vm, attr)
        if not role.variable_name:
            continue
        loc = format_source_loc(role.source_line, role.source_column)
        lines.append(
            f"    - {label}: {role.variable_name} [{role.confidence}]{loc}"
        )
        lines.append(f"      {role.reasoning}")

    if vm.loop_entry is not None:
        le = vm.loop_entry
        loc = format_source_loc(le.source_line, le.source_column)
        lines.append(f"    - Loop Entry: Line {le.line_number}{loc}")
        if le.description:
            lines.append(f"      {le.description}")

    if vm.breakpoint is not None:
        bp = vm.breakpoint
        loc = format_source_loc(bp.source_line, bp.source_column)
        lines.append(f"    - Breakpoint: Line {bp.line_number}{loc}")
        if bp.opcode_read_pattern:
            lines.append(f"      Opcode Read: {bp.opcode_read_pattern}")
        if bp.description:
            lines.append(f"      {bp.description}")
    return lines
