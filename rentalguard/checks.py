# rentalguard/checks.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.cloud import firestore as gcf

CHECKS = "checks"
RECENT_LIMIT = 10


def risk_level(score: float) -> str:
    if score >= 60:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return None


def save_check(db, check: Dict[str, Any], user_id: Optional[str] = None) -> Dict[str, Any]:
    score = float(check["score"])
    doc = {
        "score": score,
        "risk_level": risk_level(score),
        "red_flags": check.get("red_flags") or [],
        "top_signals": check.get("top_signals") or [],
        "advice": check.get("advice") or [],
        "recommendation": check.get("recommendation") or "",
        "notes": check.get("notes") or "",
        "user_id": user_id,
        "created_at": datetime.now(timezone.utc),
    }
    # add() returns (write time, DocumentReference)
    _, doc_ref = db.collection(CHECKS).add(doc)
    return {
        "id": doc_ref.id,
        "created_at": doc["created_at"],
        "score": doc["score"],
        "risk_level": doc["risk_level"],
    }


def recent_checks(db, user_id: str, limit: int = RECENT_LIMIT) -> List[Dict[str, Any]]:
    docs = (
        db.collection(CHECKS)
        .where("user_id", "==", user_id)
        .order_by("created_at", direction=gcf.Query.DESCENDING)
        .limit(limit)
        .stream()
    )
    rows = []
    for d in docs:
        it = d.to_dict()
        rows.append({
            "id": d.id,
            "created_at": it.get("created_at"),
            "score": it.get("score"),
            "risk_level": it.get("risk_level"),
            "red_flags": it.get("red_flags") or [],
        })
    return rows
