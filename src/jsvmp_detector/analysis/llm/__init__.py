"""LLM-based detection: prompt, call, parse, batch and merge."""

from jsvmp_detector.analysis.llm._llm_call import (
    LLMCallResult,
    guarded_llm_call,
)
from jsvmp_detector.analysis.llm.client import create_model_client
from jsvmp_detector.analysis.llm.merger import (
    deduplicate_regions,
    merge_detection_results,
)
from jsvmp_detector.analysis.llm.parser import parse_detection_result
from jsvmp_detector.analysis.llm.processor import (
    BatchProgress,
    BatchRunResult,
    process_batches,
)
from jsvmp_detector.analysis.llm.schemas import (
    DetectionRegion,
    DetectionResult,
    DetectionSummary,
    GlobalBytecodeInfo,
    VMComponents,
    VMComponentVariable,
)

__all__ = [
    "BatchProgress",
    "BatchRunResult",
    "DetectionRegion",
    "DetectionResult",
    "DetectionSummary",
    "GlobalBytecodeInfo",
    "LLMCallResult",
    "VMComponentVariable",
    "VMComponents",
    "create_model_client",
    "deduplicate_regions",
    "guarded_llm_call",
    "merge_detection_results",
    "parse_detection_result",
    "process_batches",
]
