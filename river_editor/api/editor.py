"""
River editing API endpoints.

Each session owns one raster buffer and its undo history. Sessions live
in an in-process registry and are addressed by UUID. Requests against a
session run to completion before the next one is handled.
"""

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from collections import OrderedDict
import structlog
import uuid

from ..config import settings, get_editor_settings
from ..core.session import EditorSession, StrokeEvent, StrokePhase
from ..core.stroke import Tool
from ..utils.image_io import ImageLoadError, decode_base64_image

logger = structlog.get_logger()

# Create router for editor endpoints
router = APIRouter(prefix="/sessions", tags=["River Editor"])

# Open sessions, oldest first
sessions: "OrderedDict[str, EditorSession]" = OrderedDict()


# Pydantic models for editing operations
class SessionCreate(BaseModel):
    """Start a session from an encoded image or a blank canvas."""

    image_base64: Optional[str] = Field(default=None, description="Base64 image or data URL")
    width: Optional[int] = Field(default=None, ge=1, description="Blank canvas width")
    height: Optional[int] = Field(default=None, ge=1, description="Blank canvas height")
    reclassify: bool = Field(default=False, description="Run global reconciliation after loading")

    @model_validator(mode="after")
    def check_source(self):
        if self.image_base64 is None and (self.width is None or self.height is None):
            raise ValueError("Provide image_base64 or both width and height")
        return self


class StrokeEventModel(BaseModel):
    """Pointer sample in grid coordinates."""

    tool: Tool = Field(default=Tool.RIVER, description="river, source, junction or eraser")
    x: int = Field(description="Grid column")
    y: int = Field(description="Grid row")
    phase: StrokePhase = Field(description="begin, extend or end")


class StrokeRequest(BaseModel):
    events: List[StrokeEventModel] = Field(description="Events applied in order")


class SessionStatus(BaseModel):
    session_id: str
    loaded: bool
    width: Optional[int] = None
    height: Optional[int] = None
    state: str
    can_undo: bool
    can_redo: bool
    history_depth: int


class EditResponse(BaseModel):
    """Standard response for editing operations."""

    success: bool = Field(description="Whether the operation was applied")
    message: str = Field(description="Human-readable message")
    affected_count: int = Field(default=0, description="Number of events or pixels affected")
    status: SessionStatus


# Helper functions
def get_session_or_404(session_id: str) -> EditorSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def session_status(session_id: str, session: EditorSession) -> SessionStatus:
    return SessionStatus(session_id=session_id, **session.status())


def edit_response(session_id: str, session: EditorSession, success: bool,
                  message: str, affected_count: int = 0) -> EditResponse:
    return EditResponse(
        success=success,
        message=message,
        affected_count=affected_count,
        status=session_status(session_id, session),
    )


def register_session(session: EditorSession) -> str:
    """Store a session, evicting the oldest when the registry is full."""
    max_sessions = get_editor_settings().sessions.max_sessions
    while len(sessions) >= max_sessions:
        evicted, _ = sessions.popitem(last=False)
        logger.info("Session evicted", session_id=evicted)

    session_id = str(uuid.uuid4())
    sessions[session_id] = session
    return session_id


# API endpoints
@router.post("", response_model=SessionStatus, status_code=201)
async def create_session(request: SessionCreate):
    """Open a session from an uploaded image or a blank black canvas."""
    session = EditorSession(history_capacity=get_editor_settings().history.capacity)

    if request.image_base64 is not None:
        try:
            session.load(decode_base64_image(request.image_base64))
        except ImageLoadError as e:
            logger.warning("Image rejected", error=str(e))
            raise HTTPException(status_code=400, detail=str(e))
    else:
        if request.width > settings.max_image_width or request.height > settings.max_image_height:
            raise HTTPException(status_code=400, detail="Requested canvas exceeds size limit")
        session.new_blank(request.width, request.height)

    if request.reclassify:
        session.reclassify_all()

    session_id = register_session(session)
    logger.info("Session created", session_id=session_id)
    return session_status(session_id, session)


@router.get("/{session_id}", response_model=SessionStatus)
async def get_session(session_id: str):
    return session_status(session_id, get_session_or_404(session_id))


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str):
    get_session_or_404(session_id)
    del sessions[session_id]
    logger.info("Session closed", session_id=session_id)
    return Response(status_code=204)


@router.post("/{session_id}/strokes", response_model=EditResponse)
async def apply_strokes(session_id: str, request: StrokeRequest):
    """
    Apply a batch of stroke events.

    Events are applied in order; the batch stops at the first event the
    session cannot accept, and the response reports how many succeeded.
    """
    session = get_session_or_404(session_id)

    limit = get_editor_settings().sessions.max_events_per_request
    if len(request.events) > limit:
        raise HTTPException(status_code=400, detail=f"At most {limit} events per request")

    applied = 0
    for event in request.events:
        if not session.handle_event(StrokeEvent(tool=event.tool, x=event.x, y=event.y,
                                                phase=event.phase)):
            break
        applied += 1

    success = applied == len(request.events)
    message = f"Applied {applied} of {len(request.events)} events"
    logger.info("Strokes applied", session_id=session_id, applied=applied,
                total=len(request.events))
    return edit_response(session_id, session, success, message, applied)


@router.post("/{session_id}/cancel", response_model=EditResponse)
async def cancel_stroke(session_id: str):
    session = get_session_or_404(session_id)
    success = session.cancel_stroke()
    return edit_response(session_id, session, success,
                         "Stroke cancelled" if success else "No active stroke")


@router.post("/{session_id}/undo", response_model=EditResponse)
async def undo(session_id: str):
    session = get_session_or_404(session_id)
    success = session.undo()
    return edit_response(session_id, session, success,
                         "Undone" if success else "Nothing to undo")


@router.post("/{session_id}/redo", response_model=EditResponse)
async def redo(session_id: str):
    session = get_session_or_404(session_id)
    success = session.redo()
    return edit_response(session_id, session, success,
                         "Redone" if success else "Nothing to redo")


@router.post("/{session_id}/clear", response_model=EditResponse)
async def clear(session_id: str):
    """Clear the whole canvas. Callers are expected to confirm first."""
    session = get_session_or_404(session_id)
    success = session.clear()
    return edit_response(session_id, session, success,
                         "Canvas cleared" if success else "Clear unavailable")


@router.post("/{session_id}/reconcile", response_model=EditResponse)
async def reconcile(session_id: str):
    """Run the global network reconciliation pass."""
    session = get_session_or_404(session_id)
    count = session.reclassify_all()
    if count is None:
        return edit_response(session_id, session, False, "Reconciliation unavailable")
    return edit_response(session_id, session, True,
                         f"Reclassified {count} river pixels", count)


@router.get("/{session_id}/export")
async def export_bmp(session_id: str):
    """Download the current canvas as a 24-bit BMP."""
    session = get_session_or_404(session_id)
    data = session.export_bmp()
    if data is None:
        raise HTTPException(status_code=409, detail="No image loaded")

    return Response(
        content=data,
        media_type="image/bmp",
        headers={"Content-Disposition": f'attachment; filename="{settings.export_filename}"'},
    )
