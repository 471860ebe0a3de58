"""Error taxonomy for the verify pipeline.

Each error carries the HTTP status it maps to and a message that is safe to
show to the caller. Extraction failures and unparsable model output are not
errors: they degrade to fallback values instead.
"""


class VerifyError(Exception):
    status_code = 500
    kind = "internal_error"

    def __init__(self, message: str, detail: str = ""):
        super().__init__(message)
        self.message = message
        self.detail = detail  # operator-facing, never returned to the caller


class InputValidationError(VerifyError):
    status_code = 400
    kind = "input_validation"


class InferenceAuthError(VerifyError):
    status_code = 502
    kind = "inference_auth"


class InferenceRateLimited(VerifyError):
    status_code = 503
    kind = "inference_rate_limited"


class InferenceUpstreamError(VerifyError):
    status_code = 502
    kind = "inference_upstream"
