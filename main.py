import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from bson import Binary
from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from config import Settings, configure_logging
from database import MongoStore, get_store
from errors import IntakeError, PersistenceError, RecordNotFound, UploadTooLarge, ValidationFailed
from schemas import (
    CONTACTS,
    DEFAULT_FILE_TYPE,
    ENQUIRIES,
    FEEDBACKS,
    Attachment,
    ContactIn,
    ContactRecord,
    EnquiryIn,
    EnquiryRecord,
    ErrorOut,
    FeedbackIn,
    FeedbackRecord,
    MessageOut,
)
from validators import Rejected, validate_contact, validate_enquiry, validate_feedback, validate_upload

logger = logging.getLogger("intake.app")

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")
INVALID_FIELDS = "Missing or invalid required fields"

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def read_root():
    return "Form intake backend is running."


@router.get("/api/health")
def health():
    return {"status": "ok", "message": "Backend is running and reachable."}


@router.get("/api/health/database")
def test_database(request: Request, store: MongoStore = Depends(get_store)):
    """Test endpoint to check if database is available and accessible"""
    response: Dict[str, Any] = {
        "backend": "Running",
        "database": "Not Available",
        "database_url": "Set" if request.app.state.settings.database_url else "Not Set",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }

    try:
        info = store.ping()
    except PersistenceError as e:
        response["database"] = f"Error: {str(e)[:80]}"
        return response

    response["database"] = "Connected & Working"
    response["database_name"] = info["name"]
    response["connection_status"] = "Connected"
    response["collections"] = info["collections"]
    return response


# -----------------------------------------------------------------------------
# Submissions
# -----------------------------------------------------------------------------
def _rejected(result) -> None:
    if isinstance(result, Rejected):
        raise ValidationFailed(result.reasons)


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.post(
    "/api/contact",
    status_code=201,
    response_model=MessageOut,
    responses={500: {"model": ErrorOut}},
)
def create_contact(
    payload: Optional[ContactIn] = Body(None),
    store: MongoStore = Depends(get_store),
):
    """Store a contact form submission. Every field is optional."""
    result = validate_contact(payload or ContactIn())
    _rejected(result)
    try:
        store.create_document(CONTACTS, result.value)
    except PersistenceError:
        logger.exception("Failed to store contact submission")
        return _server_error("Failed to submit contact form")
    return {"message": "Contact form submitted successfully"}


async def _read_json(request: Request) -> Any:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise ValidationFailed([f"body is not valid JSON: {exc}"]) from exc


async def read_attachment(upload: Any, limit: int) -> Optional[Attachment]:
    """Read an uploaded file part, refusing anything over ``limit`` bytes.

    At most ``limit + 1`` bytes are read, which is enough to tell an
    oversized upload apart without buffering all of it.
    """
    if not isinstance(upload, UploadFile):
        return None
    data = await upload.read(limit + 1)
    if isinstance(validate_upload(len(data), limit), Rejected):
        raise UploadTooLarge(limit)
    if not upload.filename and not data:
        return None
    return Attachment(
        fileName=upload.filename or "upload",
        file=data,
        fileType=upload.content_type or DEFAULT_FILE_TYPE,
    )


@router.post(
    "/api/enquiry",
    status_code=201,
    response_model=MessageOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
async def create_enquiry(request: Request, store: MongoStore = Depends(get_store)):
    """Store an enquiry sent as JSON or as a form with an optional "file" part."""
    limit = request.app.state.settings.max_upload_bytes
    attachment = None

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        try:
            form = await request.form()
        except HTTPException as exc:
            # Starlette reports unparseable form bodies as a 400 HTTPException
            raise ValidationFailed([str(exc.detail)], reason="Invalid form data") from exc
        try:
            fields = {k: v for k, v in form.items() if isinstance(v, str)}
            attachment = await read_attachment(form.get("file"), limit)
        finally:
            await form.close()
    else:
        fields = await _read_json(request)

    try:
        payload = EnquiryIn.model_validate(fields)
    except ValidationError as exc:
        raise ValidationFailed([err["msg"] for err in exc.errors()]) from exc

    result = validate_enquiry(payload)
    _rejected(result)
    document = result.value
    if attachment is not None:
        document["fileName"] = attachment.fileName
        document["file"] = Binary(attachment.file)
        document["fileType"] = attachment.fileType

    try:
        await run_in_threadpool(store.create_document, ENQUIRIES, document)
    except PersistenceError:
        logger.exception("Failed to store enquiry submission")
        return _server_error("Failed to submit enquiry form")
    return {"message": "Enquiry form submitted successfully"}


@router.post(
    "/api/feedback",
    status_code=201,
    response_model=MessageOut,
    responses={400: {"model": ErrorOut}, 500: {"model": ErrorOut}},
)
def create_feedback(payload: FeedbackIn, store: MongoStore = Depends(get_store)):
    result = validate_feedback(payload)
    _rejected(result)
    try:
        store.create_document(FEEDBACKS, result.value, timestamps=("createdAt", "updatedAt"))
    except PersistenceError:
        logger.exception("Failed to store feedback submission")
        return _server_error("Failed to submit feedback")
    return {"message": "Feedback submitted successfully"}


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------
def _list_or_empty(store: MongoStore, collection: str, projection=None):
    # Dashboards get an empty list on failure; the detail goes to the log only
    try:
        return store.get_documents(collection, projection=projection)
    except PersistenceError:
        logger.exception("--- ERROR FETCHING %s ---", collection.upper())
        return JSONResponse(status_code=500, content=[])


@router.get("/api/admin/contacts", response_model=List[ContactRecord])
def list_contacts(store: MongoStore = Depends(get_store)):
    return _list_or_empty(store, CONTACTS)


@router.get("/api/admin/enquiries", response_model=List[EnquiryRecord])
def list_enquiries(store: MongoStore = Depends(get_store)):
    return _list_or_empty(store, ENQUIRIES, projection={"file": 0})


@router.get("/api/admin/feedbacks", response_model=List[FeedbackRecord])
def list_feedbacks(store: MongoStore = Depends(get_store)):
    return _list_or_empty(store, FEEDBACKS)


@router.get("/api/admin/enquiry/image/{enquiry_id}")
def get_enquiry_image(enquiry_id: str, store: MongoStore = Depends(get_store)):
    """Return an enquiry's stored file with its original MIME type."""
    try:
        doc = store.get_document(ENQUIRIES, enquiry_id, projection={"file": 1, "fileType": 1})
    except RecordNotFound:
        return PlainTextResponse("Image not found", status_code=404)
    except PersistenceError:
        logger.exception("Failed to fetch file for enquiry %s", enquiry_id)
        return PlainTextResponse("Error retrieving image", status_code=500)

    if doc.get("file") is None:
        return PlainTextResponse("Image not found", status_code=404)
    # Set the header directly so the stored type is sent back unchanged
    return Response(
        content=bytes(doc["file"]),
        headers={"Content-Type": doc.get("fileType") or DEFAULT_FILE_TYPE},
    )


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------
async def rejected_submission_handler(request: Request, exc: IntakeError):
    """Render ValidationFailed and UploadTooLarge as 400 {"error": reason}.

    Store errors never reach here: each route maps them itself.
    """
    if isinstance(exc, ValidationFailed):
        logger.info("Rejected %s: %s", request.url.path, "; ".join(exc.reasons))
    else:
        logger.info("Rejected %s: %s", request.url.path, exc.reason)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.reason})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": INVALID_FIELDS})


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(settings: Optional[Settings] = None, store: Optional[MongoStore] = None) -> FastAPI:
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = MongoStore.connect(settings)
        logger.info("Server is running on port %s", settings.port)
        yield
        if owns_store:
            app.state.store.close()

    app = FastAPI(title="Form Intake Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationFailed, rejected_submission_handler)
    app.add_exception_handler(UploadTooLarge, rejected_submission_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
