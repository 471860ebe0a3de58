from pydantic import BaseModel
from typing import Any, Optional, List

class VerifyMeta(BaseModel):
    notes: Any = None       # free text; scalars are stringified, anything else ignored

class VerifyIn(BaseModel):
    url: Optional[str] = None
    imageDataUrl: Optional[str] = None  # data:image/...;base64,...
    meta: Optional[VerifyMeta] = None

class RedFlag(BaseModel):
    text: str
    severity: str           # "low" | "medium" | "high"

class VerifyOut(BaseModel):
    score: int              # 0..100, 100 = definitely scam
    verdict: str            # "no-scam" | "likely-no-scam" | "uncertain" | "likely-scam" | "scam"
    top_signals: List[str] = []
    advice: List[str] = []
    notes: str
    explanation: str
    red_flags: List[RedFlag] = []
    recommendation: str

class CheckIn(BaseModel):
    score: Any = None       # validated as numeric by the route
    red_flags: List[RedFlag] = []
    top_signals: List[str] = []
    advice: List[str] = []
    recommendation: str = ""
    notes: str = ""
