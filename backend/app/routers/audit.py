"""Registry audit trail router: history plus a live WebSocket feed."""

import asyncio
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import CurrentUser, authenticate_token, require_staff
from app.models.audit import RegistryAuditEntry
from app.models.permit import PermitApplication
from app.schemas.audit import AuditEntryResponse
from app.services.filters import can_view_application
from app.services.realtime import CLOSED, broadcaster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["audit-trail"])


@router.get("/{application_id}/audit-trail", response_model=List[AuditEntryResponse])
async def get_audit_trail(
    application_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    """Audit entries for an application, newest first."""
    application = await db.get(PermitApplication, application_id)
    if not application or not can_view_application(current_user, application):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")

    result = await db.execute(
        select(RegistryAuditEntry)
        .where(RegistryAuditEntry.permit_application_id == application_id)
        .order_by(RegistryAuditEntry.created_at.desc())
    )
    return [AuditEntryResponse.model_validate(e) for e in result.scalars().all()]


async def get_websocket_user(
    token: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> Optional[CurrentUser]:
    """Authenticate a WebSocket from its ?token= query parameter."""
    try:
        return await authenticate_token(db, token)
    except HTTPException as e:
        logger.info("Audit trail WebSocket rejected: %s", e.detail)
        return None


async def _send_loop(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        if message is CLOSED:
            # Dropped for falling behind; the client reconnects and reloads
            await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
            return
        await websocket.send_json(message)


async def _receive_loop(websocket: WebSocket) -> None:
    # Client messages are ignored apart from keepalive pings
    while True:
        message = await websocket.receive_text()
        if message == "ping":
            await websocket.send_json({"type": "pong"})


@router.websocket("/{application_id}/audit-trail/ws")
async def audit_trail_stream(
    websocket: WebSocket,
    application_id: UUID,
    current_user: Optional[CurrentUser] = Depends(get_websocket_user),
    db: AsyncSession = Depends(get_db),
):
    """Push each committed audit entry for the application as JSON."""
    if current_user is None or not current_user.is_staff:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    application = await db.get(PermitApplication, application_id)
    visible = application is not None and can_view_application(current_user, application)
    # Release the connection; the stream itself needs no database access
    await db.close()
    if not visible:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # Subscribe before accepting so nothing committed after the handshake is missed
    queue = await broadcaster.subscribe(application_id)
    tasks = []
    try:
        await websocket.accept()
        tasks = [
            asyncio.create_task(_send_loop(websocket, queue)),
            asyncio.create_task(_receive_loop(websocket)),
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Audit trail WebSocket for %s closed: %s", application_id, exc)
    finally:
        for task in tasks:
            task.cancel()
        await broadcaster.unsubscribe(application_id, queue)
