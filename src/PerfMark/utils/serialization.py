# ============================================================================
# PerfMark - Serialization Utilities
#
# Purpose: Serialize aggregator summaries to JSON
# Inputs: Summary dicts (ObserverAggregator.build_summary_dict)
# Outputs: JSON strings
# Dependencies: json
# Usage: json_str = serialize_summary_to_json(aggregator.build_summary_dict())
#
# Changelog:
#   2026-03-11: Initial serialization for the CLI --json flag
# ============================================================================

import json
from typing import Any, Dict, Optional


def serialize_summary_to_json(summary: Dict[str, Any], indent: Optional[int] = None) -> str:
    """
    Serialize a summary dict to a JSON string.

    Args:
        summary: Summary to serialize
        indent: JSON indentation (None for compact, 2 for pretty-print)

    Returns:
        JSON string
    """
    if indent is None:
        return json.dumps(summary, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(summary, indent=indent, ensure_ascii=False)
