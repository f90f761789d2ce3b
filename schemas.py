"""
Database Schemas for the form intake backend

Each submission kind maps to one MongoDB collection:
- Contact  -> "contacts"
- Enquiry  -> "enquiries"
- Feedback -> "feedbacks"

The *In models describe request bodies. They are deliberately loose so
that required-field rules live in validators.py and produce one
aggregated 400. The *Record models describe what admin listings return.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

CONTACTS = "contacts"
ENQUIRIES = "enquiries"
FEEDBACKS = "feedbacks"

DEFAULT_FILE_TYPE = "application/octet-stream"

ObjectIdStr = Annotated[str, BeforeValidator(str)]


def _as_text(value):
    # Scalars sent for text fields are stored as their string form
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


Text = Annotated[Optional[str], BeforeValidator(_as_text)]


class SubmissionIn(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ContactIn(SubmissionIn):
    """
    Contact form submission. Every field is optional.
    Collection name: "contacts"
    """
    name: Text = Field(None, description="Full name")
    phone: Text = Field(None, description="Phone number")
    email: Text = Field(None, description="Email address")
    country: Text = Field(None, description="Country")
    message: Text = Field(None, description="Free text message")


class EnquiryIn(ContactIn):
    """
    Enquiry form fields. The optional attachment arrives separately as a
    multipart "file" part and is stored as fileName/file/fileType.
    Collection name: "enquiries"
    """


class FeedbackIn(SubmissionIn):
    """
    Restaurant feedback form.
    Collection name: "feedbacks"
    """
    name: Text = None
    mobile: Text = None
    overallExperience: Text = None
    whatDidYouTry: Optional[List[Annotated[str, BeforeValidator(_as_text)]]] = None
    comments: Text = ""
    foodQuality: Text = None
    serviceStaff: Text = None
    whatsappUpdates: Text = None
    whatsappNumber: Text = ""


class Attachment(BaseModel):
    fileName: str
    file: bytes
    fileType: str = DEFAULT_FILE_TYPE


class RecordOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: ObjectIdStr = Field(..., alias="_id")
    createdAt: Optional[datetime] = None


class ContactRecord(RecordOut):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    country: Optional[str] = None
    message: Optional[str] = None


class EnquiryRecord(ContactRecord):
    # The binary "file" field is never part of a listing
    fileName: Optional[str] = None
    fileType: Optional[str] = None


class FeedbackRecord(RecordOut):
    name: Optional[str] = None
    mobile: Optional[str] = None
    overallExperience: Optional[str] = None
    whatDidYouTry: List[str] = []
    comments: Optional[str] = ""
    foodQuality: Optional[str] = None
    serviceStaff: Optional[str] = None
    whatsappUpdates: Optional[str] = None
    whatsappNumber: Optional[str] = ""
    updatedAt: Optional[datetime] = None


class MessageOut(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str
