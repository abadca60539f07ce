"""Parse and validate a model's raw JSON response into a DetectionResult.

Two response shapes are in circulation: the legacy flat one
(``start``/``end``, string ``summary``, ``debugging_entry_point``) and the
enriched one (``start_line``/``end_line``, structured ``summary``,
``vm_components``, ``global_bytecode``). Required fields are validated
strictly and never coerced. Optional enrichment is extracted field by
field: a malformed leaf degrades to None instead of failing the parse.
"""

from __future__ import annotations

import json
import math
import re
from enum import StrEnum
from typing import Any, cast

from jsvmp_detector.analysis.llm.schemas import (
    BreakpointInjection,
    DebuggingEntryPoint,
    DetectionRegion,
    DetectionResult,
    DetectionSummary,
    GlobalBytecodeInfo,
    LoopEntryInjection,
    VMComponents,
    VMComponentVariable,
)
from jsvmp_detector.constants import (
    BytecodePatternType,
    ConfidenceLevel,
    DetectionType,
)
from jsvmp_detector.errors import ResponseParseError

_FENCE_RE = re.compile(
    r"^```(?:json|JSON)?\s*\n(.*?)```\s*$",
    re.DOTALL,
)

_INVALID = "Invalid model response"

VM_COMPONENT_ROLES = (
    "instruction_pointer",
    "stack_pointer",
    "virtual_stack",
    "bytecode_array",
)


def parse_detection_result(response_text: str) -> DetectionResult:
    """Validate ``response_text`` or raise ResponseParseError."""
    try:
        parsed: Any = json.loads(_strip_fences(response_text))
    except json.JSONDecodeError as exc:
        msg = f"Could not parse model response as JSON: {exc}"
        raise ResponseParseError(msg) from exc

    if not isinstance(parsed, dict):
        msg = f"{_INVALID}: expected a JSON object"
        raise ResponseParseError(msg)
    data = cast(dict[str, Any], parsed)

    summary = _parse_summary(data.get("summary"))

    raw_regions: Any = data.get("regions")
    if not isinstance(raw_regions, list):
        msg = f"{_INVALID}: missing required field: regions"
        raise ResponseParseError(msg)

    regions = [
        _parse_region(index, raw)
        for index, raw in enumerate(cast(list[Any], raw_regions))
    ]

    return DetectionResult(
        summary=summary,
        global_bytecode=_parse_global_bytecode(data.get("global_bytecode")),
        regions=regions,
    )


def _strip_fences(text: str) -> str:
    """Remove a wrapping ```json fence some providers add in JSON mode."""
    m = _FENCE_RE.match(text.strip())
    return m.group(1) if m else text


# ---------------------------------------------------------------------------
# Required fields
# ---------------------------------------------------------------------------


def _parse_summary(raw: Any) -> str | DetectionSummary:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict):
        obj = cast(dict[str, Any], raw)
        overall = obj.get("overall_description")
        recommendation = obj.get("debugging_recommendation")
        if not isinstance(overall, str) or not isinstance(
            recommendation, str
        ):
            msg = (
                f"{_INVALID}: summary object requires string fields "
                "overall_description and debugging_recommendation"
            )
            raise ResponseParseError(msg)
        return DetectionSummary(
            overall_description=overall,
            debugging_recommendation=recommendation,
        )
    msg = f"{_INVALID}: missing required field: summary"
    raise ResponseParseError(msg)


def _parse_region(index: int, raw: Any) -> DetectionRegion:
    where = f"regions[{index}]"
    if not isinstance(raw, dict):
        msg = f"{_INVALID}: {where} is not an object"
        raise ResponseParseError(msg)
    region = cast(dict[str, Any], raw)

    start = _required_line(region, where, "start_line", "start")
    end = _required_line(region, where, "end_line", "end")

    for name in ("type", "confidence", "description"):
        if not isinstance(region.get(name), str):
            msg = f"{_INVALID}: {where} missing required field: {name}"
            raise ResponseParseError(msg)

    region_type = _required_enum(
        DetectionType, region["type"], f"{where}.type"
    )
    confidence = _required_enum(
        ConfidenceLevel, region["confidence"], f"{where}.confidence"
    )

    if start > end:
        msg = (
            f"{_INVALID}: {where} start line {start} is after "
            f"end line {end}"
        )
        raise ResponseParseError(msg)

    return DetectionRegion(
        start=start,
        end=end,
        type=region_type,
        confidence=confidence,
        description=region["description"],
        vm_components=_parse_vm_components(region.get("vm_components")),
        debugging_entry_point=_parse_debugging_entry_point(
            region.get("debugging_entry_point")
        ),
    )


def _required_line(
    region: dict[str, Any], where: str, current: str, legacy: str
) -> int:
    """The current field name wins; the legacy one is only a fallback."""
    value = region.get(current)
    if value is None:
        value = region.get(legacy)
    if not _is_number(value):
        msg = (
            f"{_INVALID}: {where} missing required field: "
            f"{current} or {legacy}"
        )
        raise ResponseParseError(msg)
    if not _is_integral(value):
        msg = (
            f"{_INVALID}: {where}.{current} must be an integer "
            f"line number, got {value!r}"
        )
        raise ResponseParseError(msg)
    return int(value)


def _required_enum[E: StrEnum](enum: type[E], value: str, where: str) -> E:
    try:
        return enum(value)
    except ValueError:
        valid = ", ".join(member.value for member in enum)
        msg = (
            f'{_INVALID}: {where} has invalid value "{value}". '
            f"Valid values: {valid}"
        )
        raise ResponseParseError(msg) from None


# ---------------------------------------------------------------------------
# Optional enrichment (lenient)
# ---------------------------------------------------------------------------


def _parse_vm_components(raw: Any) -> VMComponents | None:
    """Attach only when at least one role has a recognized confidence."""
    if not isinstance(raw, dict):
        return None
    obj = cast(dict[str, Any], raw)

    roles = {name: _parse_vm_variable(obj.get(name)) for name in VM_COMPONENT_ROLES}
    if all(role is None for role in roles.values()):
        return None

    return VMComponents(
        instruction_pointer=roles["instruction_pointer"] or VMComponentVariable(),
        stack_pointer=roles["stack_pointer"] or VMComponentVariable(),
        virtual_stack=roles["virtual_stack"] or VMComponentVariable(),
        bytecode_array=roles["bytecode_array"] or VMComponentVariable(),
        loop_entry=_parse_loop_entry(obj.get("loop_entry")),
        breakpoint=_parse_breakpoint(obj.get("breakpoint")),
    )


def _parse_vm_variable(raw: Any) -> VMComponentVariable | None:
    if not isinstance(raw, dict):
        return None
    obj = cast(dict[str, Any], raw)
    confidence = _optional_enum(ConfidenceLevel, obj.get("confidence"))
    if confidence is None:
        return None
    return VMComponentVariable(
        variable_name=_optional_str(obj.get("variable_name")),
        line_number=_optional_int(obj.get("line_number")),
        source_line=_optional_int(obj.get("source_line")),
        source_column=_optional_int(obj.get("source_column")),
        confidence=confidence,
        reasoning=_optional_str(obj.get("reasoning")) or "",
    )


def _parse_loop_entry(raw: Any) -> LoopEntryInjection | None:
    if not isinstance(raw, dict):
        return None
    obj = cast(dict[str, Any], raw)
    line_number = _optional_int(obj.get("line_number"))
    if line_number is None:
        return None
    return LoopEntryInjection(
        line_number=line_number,
        source_line=_optional_int(obj.get("source_line")),
        source_column=_optional_int(obj.get("source_column")),
        description=_optional_str(obj.get("description")) or "",
    )


def _parse_breakpoint(raw: Any) -> BreakpointInjection | None:
    if not isinstance(raw, dict):
        return None
    obj = cast(dict[str, Any], raw)
    line_number = _optional_int(obj.get("line_number"))
    if line_number is None:
        return None
    return BreakpointInjection(
        line_number=line_number,
        source_line=_optional_int(obj.get("source_line")),
        source_column=_optional_int(obj.get("source_column")),
        opcode_read_pattern=_optional_str(obj.get("opcode_read_pattern")),
        description=_optional_str(obj.get("description")) or "",
    )


def _parse_debugging_entry_point(raw: Any) -> DebuggingEntryPoint | None:
    if not isinstance(raw, dict):
        return None
    obj = cast(dict[str, Any], raw)
    line_number = _optional_int(obj.get("line_number"))
    if line_number is None:
        return None
    return DebuggingEntryPoint(
        line_number=line_number,
        description=_optional_str(obj.get("description")) or "",
    )


def _parse_global_bytecode(raw: Any) -> GlobalBytecodeInfo | None:
    if not isinstance(raw, dict):
        return None
    obj = cast(dict[str, Any], raw)
    return GlobalBytecodeInfo(
        variable_name=_optional_str(obj.get("variable_name")),
        definition_line=_optional_int(obj.get("definition_line")),
        source_line=_optional_int(obj.get("source_line")),
        source_column=_optional_int(obj.get("source_column")),
        pattern_type=_optional_enum(
            BytecodePatternType, obj.get("pattern_type")
        ),
        local_bytecode_var=_optional_str(obj.get("local_bytecode_var")),
        transform_expression=_optional_str(
            obj.get("transform_expression")
        ),
        structure_description=_optional_str(
            obj.get("structure_description")
        ),
        description=_optional_str(obj.get("description")) or "",
    )


# ---------------------------------------------------------------------------
# Leaf helpers
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    # JSON true/false decode to bool, which is an int subclass.
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_integral(value: Any) -> bool:
    """A number with no fractional part that a double can hold.

    Integers beyond float range fail the check, as they would once
    decoded by a JavaScript client.
    """
    if not _is_number(value):
        return False
    try:
        number = float(value)
    except OverflowError:
        return False
    return math.isfinite(number) and number.is_integer()


def _optional_int(value: Any) -> int | None:
    if _is_integral(value):
        return int(value)
    return None


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _optional_enum[E: StrEnum](enum: type[E], value: Any) -> E | None:
    if not isinstance(value, str):
        return None
    try:
        return enum(value)
    except ValueError:
        return None
