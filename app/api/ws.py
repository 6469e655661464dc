# app/api/ws.py
"""WebSocket endpoint that carries force-logout events to live sessions."""

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from app.crud import account as account_crud
from app.database import SessionLocal
from app.models.account import ACCOUNT_TYPES
from app.services.realtime import manager
from app.utils.security import decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def _token_owns_account(token: str, account_type: str, account_id: int) -> bool:
    token_data = decode_access_token(token) if token else None
    if token_data is None or token_data.role != account_type:
        return False
    with SessionLocal() as db:
        account = account_crud.get_account(db, account_type, account_id)
        return account is not None and account.email == token_data.email


@router.websocket("/ws/{account_type}/{account_id}")
async def account_socket(
    websocket: WebSocket,
    account_type: str,
    account_id: int,
    token: str = Query(""),
):
    allowed = account_type in ACCOUNT_TYPES and await run_in_threadpool(
        _token_owns_account, token, account_type, account_id
    )
    if not allowed:
        logger.info("Rejected WebSocket for %s %s", account_type, account_id)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, account_type, account_id)
    try:
        while True:
            # Clients only listen; incoming frames are keep-alives.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, account_type, account_id)
