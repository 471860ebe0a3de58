# rentalguard/main.py
import logging
import math
from typing import Optional

from fastapi import Body, Depends, FastAPI, Header, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .checks import bearer_token, recent_checks, save_check
from .config import settings
from .errors import VerifyError
from .firebase import get_db, verify_token
from .inference import InferenceInvoker
from .models import CheckIn, VerifyIn, VerifyOut
from .verify import VerifyOrchestrator

logging.basicConfig(level=settings.LOG_LEVEL.upper(),
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="RentalGuard Backend (listing scam checks)")

# --- Middleware ---
class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """Starlette answers preflights with a plain-text "OK"; send the same headers with no body."""

    def preflight_response(self, request_headers):
        response = super().preflight_response(request_headers)
        headers = {k: v for k, v in response.headers.items()
                   if k.lower() not in ("content-length", "content-type")}
        return Response(status_code=response.status_code, headers=headers)

app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# --- Dependencies ---
_invoker = InferenceInvoker()

def get_orchestrator() -> VerifyOrchestrator:
    return VerifyOrchestrator(_invoker)

def get_token_verifier():
    return verify_token

def get_db_getter():
    # the store is opened only once a handler actually needs it
    return get_db

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _error_field(err) -> str:
    loc = [str(p) for p in err.get("loc", ())[1:]]
    if err.get("type") == "json_invalid" or not loc:
        return "body"
    return ".".join(loc)

@app.exception_handler(RequestValidationError)
def invalid_request(request: Request, exc: RequestValidationError):
    fields = sorted({_error_field(e) for e in exc.errors()})
    logger.info("Rejected malformed request to %s: %s", request.url.path, ", ".join(fields),
                extra={"error_kind": "input_validation"})
    return _error(400, "Invalid request body: " + ", ".join(fields))


# --- Routes ---

@app.get("/health")
def health():
    return {"ok": True, "model": settings.RENTALGUARD_MODEL}


@app.options("/verify")
def verify_options():
    return Response(status_code=200)


@app.post("/verify", response_model=VerifyOut)
def verify(payload: Optional[VerifyIn] = Body(None),
           orchestrator: VerifyOrchestrator = Depends(get_orchestrator)):
    """
    Scam check for a rental listing URL and/or screenshot:
    - Fetches page text best-effort (login walls just yield no text)
    - Skips the model entirely when there is nothing to analyze
    - Always answers 200 with a complete result unless the model call itself fails
    """
    try:
        return orchestrator.verify(payload)
    except VerifyError as e:
        logger.warning("verify failed: %s %s", e.kind, e.detail or e.message,
                       extra={"error_kind": e.kind})
        return _error(e.status_code, e.message)
    except Exception:
        logger.exception("verify crashed", extra={"error_kind": "internal_error"})
        return _error(500, "Internal Server Error")


@app.post("/checks/new")
def new_check(payload: CheckIn,
              authorization: Optional[str] = Header(None),
              open_db=Depends(get_db_getter),
              verify_user=Depends(get_token_verifier)):
    try:
        score = float(payload.score)
    except (TypeError, ValueError):
        return _error(400, "score must be a number")
    if isinstance(payload.score, bool) or not math.isfinite(score):
        return _error(400, "score must be a number")

    # anonymous checks are allowed; a valid token just tags the row with its owner
    user_id = None
    token = bearer_token(authorization)
    if token:
        try:
            user_id = verify_user(token)
        except Exception as e:
            logger.info("Ignoring invalid token on /checks/new: %s", e.__class__.__name__,
                        extra={"error_kind": "auth_invalid"})

    data = payload.model_dump()
    data["score"] = score
    try:
        row = save_check(open_db(), data, user_id)
    except Exception as e:
        logger.exception("Saving check failed", extra={"error_kind": "store_error"})
        return _error(500, f"Could not save check ({e.__class__.__name__})")
    return {"ok": True, "row": row}


@app.get("/checks/recent")
def checks_recent(authorization: Optional[str] = Header(None),
                  open_db=Depends(get_db_getter),
                  verify_user=Depends(get_token_verifier)):
    token = bearer_token(authorization)
    if not token:
        return _error(401, "Missing token")
    try:
        user_id = verify_user(token)
    except Exception as e:
        logger.info("Rejected token on /checks/recent: %s", e.__class__.__name__,
                    extra={"error_kind": "auth_invalid"})
        return _error(401, "Unauthorized")
    if not user_id:
        return _error(401, "Unauthorized")

    try:
        rows = recent_checks(open_db(), user_id)
    except Exception:
        logger.exception("Loading recent checks failed", extra={"error_kind": "store_error"})
        return _error(500, "Server error")
    return {"rows": rows}
