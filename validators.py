"""
Submission rules checked before anything is written to the store.

Every function here is pure: it takes a parsed payload and returns
Accepted(value) with the fields to persist, or Rejected(reasons).
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from schemas import ContactIn, EnquiryIn, FeedbackIn

WHATSAPP_NUMBER_RE = re.compile(r"[0-9]{10}")

FEEDBACK_REQUIRED = (
    "name",
    "mobile",
    "overallExperience",
    "foodQuality",
    "serviceStaff",
    "whatsappUpdates",
)


@dataclass
class Accepted:
    value: Dict[str, Any]


@dataclass
class Rejected:
    reasons: List[str] = field(default_factory=list)


Validation = Union[Accepted, Rejected]


def _blank(value) -> bool:
    return value is None or value == ""


def validate_contact(payload: ContactIn) -> Validation:
    return Accepted(payload.model_dump(exclude_none=True))


def validate_enquiry(payload: EnquiryIn) -> Validation:
    return Accepted(payload.model_dump(exclude_none=True))


def validate_upload(size: int, limit: int) -> Validation:
    if size > limit:
        return Rejected([f"file is {size} bytes, limit is {limit}"])
    return Accepted({"size": size})


def validate_feedback(payload: FeedbackIn) -> Validation:
    reasons = [f"{name} is required" for name in FEEDBACK_REQUIRED if _blank(getattr(payload, name))]

    tried = payload.whatDidYouTry or []
    if not tried:
        reasons.append("whatDidYouTry must list at least one item")
    elif any(_blank(item) for item in tried):
        reasons.append("whatDidYouTry contains an empty item")

    number = payload.whatsappNumber or ""
    if payload.whatsappUpdates == "Yes" and not WHATSAPP_NUMBER_RE.fullmatch(number):
        reasons.append("whatsappNumber must be exactly 10 digits when whatsappUpdates is Yes")

    if reasons:
        return Rejected(reasons)

    value = payload.model_dump()
    value["comments"] = payload.comments or ""
    value["whatsappNumber"] = number
    return Accepted(value)
