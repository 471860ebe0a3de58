"""Turning free-form model replies into a complete VerifyResult.

parse_model_json() recovers a JSON object from the reply, tolerating prose
around it. coerce_result() then rebuilds every output field from that object,
substituting defaults field by field, so no reply can yield a result with a
missing or wrongly-typed field.
"""

import json
import math
import re
from typing import Any, Dict, List, Optional

FALLBACK_ADVICE = [
    "Request an in-person or live video tour before paying anything.",
    "Never send deposits or ID documents before viewing.",
    "Use secure, traceable payment methods; avoid crypto or wire.",
]
DEFAULT_NOTES = "Limited information available; proceed cautiously."
DEFAULT_EXPLANATION = "Insufficient or blocked page content. Provided general safety guidance."
DEFAULT_RECOMMENDATION = "Verify the landlord and view the property before sending any money."
DEFAULT_SEVERITY = "medium"
SIGNAL_SEPARATOR = " • "

_BRACES = re.compile(r"\{.*\}", re.DOTALL)


def parse_model_json(text: Any) -> Optional[Any]:
    """Parse the reply directly, else its first-'{'-to-last-'}' span, else None."""
    if not text or not isinstance(text, str):
        return None
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        pass
    match = _BRACES.search(text)
    if match:
        try:
            return json.loads(match.group(0))
        except (ValueError, RecursionError):
            pass
    return None


def fallback_result() -> Dict[str, Any]:
    return {
        "score": 0,
        "verdict": "uncertain",
        "top_signals": [],
        "advice": list(FALLBACK_ADVICE),
        "notes": DEFAULT_NOTES,
        "explanation": DEFAULT_EXPLANATION,
        "red_flags": [],
        "recommendation": DEFAULT_RECOMMENDATION,
    }


def clamp_score(value: Any, lo: int = 0, hi: int = 100, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        v = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(v):
        return default
    return int(round(max(lo, min(hi, v))))


def text_or(value: Any, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def string_list(value: Any, default: Optional[List[str]] = None) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return list(default) if default is not None else []
    out = []
    for item in value:
        if item is None:
            continue
        s = str(item).strip()
        if s:
            out.append(s)
    return out


def red_flag_list(value: Any) -> List[Dict[str, str]]:
    if not isinstance(value, (list, tuple)):
        return []
    flags = []
    for item in value:
        if isinstance(item, dict):
            text = item.get("text")
            text = str(text).strip() if text is not None else ""
            severity = text_or(item.get("severity"), DEFAULT_SEVERITY)
        elif item is None:
            continue
        else:
            text, severity = str(item).strip(), DEFAULT_SEVERITY
        if text:
            flags.append({"text": text, "severity": severity})
    return flags


def coerce_result(obj: Any) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        return fallback_result()

    top_signals = string_list(obj.get("top_signals"))
    if top_signals:
        derived_explanation = SIGNAL_SEPARATOR.join(top_signals)
    else:
        derived_explanation = DEFAULT_EXPLANATION

    raw_flags = obj.get("red_flags")
    if raw_flags is None:
        raw_flags = obj.get("redFlags")

    return {
        "score": clamp_score(obj.get("score")),
        "verdict": text_or(obj.get("verdict"), text_or(obj.get("risk_level"), "uncertain")),
        "top_signals": top_signals,
        "advice": string_list(obj.get("advice"), FALLBACK_ADVICE),
        "notes": text_or(obj.get("notes"), DEFAULT_NOTES),
        "explanation": text_or(obj.get("explanation"), derived_explanation),
        "red_flags": red_flag_list(raw_flags),
        "recommendation": text_or(obj.get("recommendation"), DEFAULT_RECOMMENDATION),
    }
