# rentalguard/verify.py
import logging
from typing import Any, Callable, Dict, Optional

from .errors import (
    InferenceAuthError,
    InferenceRateLimited,
    InferenceUpstreamError,
    InputValidationError,
)
from .extract import PageText, extract_page_text
from .inference import AuthFailure, InferenceInvoker, RateLimited, UpstreamError
from .models import VerifyIn
from .parsing import coerce_result, parse_model_json
from .prompt import assemble_prompt

logger = logging.getLogger(__name__)

FAST_PATH_SIGNALS = [
    "The listing page could not be read (it may be login-gated or blocking automated access).",
    "No screenshot was provided, so there is nothing else to analyze.",
    "Without the listing details the scam risk cannot be assessed.",
]
FAST_PATH_ADVICE = [
    "Upload a screenshot of the listing so it can be analyzed.",
    "Ask for a live video or in-person tour before committing.",
    "Never pay a deposit, fees or rent upfront before viewing the property.",
]
FAST_PATH_NOTES = "Listing content unavailable; no analysis was performed."
FAST_PATH_EXPLANATION = "We couldn't access the listing. Upload a screenshot for a full scam check."
FAST_PATH_RECOMMENDATION = "Upload a screenshot of the listing and run the check again."


def _clean(v: Optional[str]) -> Optional[str]:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _note_text(v: Any) -> Optional[str]:
    if isinstance(v, (int, float)):
        v = str(v)
    return _clean(v)


def fast_path_result(extraction_error: Optional[str] = None) -> Dict[str, Any]:
    if extraction_error:
        notes = f"Could not read the listing page ({extraction_error}); no analysis was performed."
    else:
        notes = FAST_PATH_NOTES
    return {
        "score": 50,
        "verdict": "uncertain",
        "top_signals": list(FAST_PATH_SIGNALS),
        "advice": list(FAST_PATH_ADVICE),
        "notes": notes,
        "explanation": FAST_PATH_EXPLANATION,
        "red_flags": [],
        "recommendation": FAST_PATH_RECOMMENDATION,
    }


class VerifyOrchestrator:
    """Runs one listing check end to end.

    validate -> extract page text -> fast path (no content) -> assemble prompt
    -> invoke model -> parse reply -> coerce. Inference failures are raised as
    VerifyError subclasses; everything else ends in a complete result dict.
    """

    def __init__(self, invoker: InferenceInvoker,
                 extract: Callable[[str], PageText] = extract_page_text):
        self.invoker = invoker
        self.extract = extract

    def verify(self, payload: Optional[VerifyIn]) -> Dict[str, Any]:
        url = _clean(payload.url) if payload else None
        image = _clean(payload.imageDataUrl) if payload else None
        notes = _note_text(payload.meta.notes) if payload and payload.meta else None

        if not url and not image:
            logger.info("Rejected verify request without url or image",
                        extra={"error_kind": InputValidationError.kind})
            raise InputValidationError("Provide 'url' or 'imageDataUrl' in JSON body.")

        page = PageText("")
        if url:
            page = self.extract(url)

        if not page.text and not image:
            logger.info("No analyzable content, returning fast-path result",
                        extra={"error_kind": "extraction_degraded"})
            return fast_path_result(page.error)

        blocks = assemble_prompt(url, page.text, image, notes)
        outcome = self.invoker.invoke(blocks)

        if isinstance(outcome, AuthFailure):
            raise InferenceAuthError("Server is missing/has an invalid OpenAI API key.", outcome.detail)
        if isinstance(outcome, RateLimited):
            raise InferenceRateLimited(
                "AI temporarily unavailable (quota/rate limit). Please try again soon.", outcome.detail)
        if isinstance(outcome, UpstreamError):
            raise InferenceUpstreamError("Upstream AI error.", outcome.detail)

        parsed = parse_model_json(outcome.raw_text)
        if not isinstance(parsed, dict):
            logger.warning("Model output was not a JSON object; using fallback result",
                           extra={"error_kind": "model_output_unparsable"})
        return coerce_result(parsed)
