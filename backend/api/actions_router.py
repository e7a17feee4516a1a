"""
Actions API Router
Lists the agent's actions for the active wallet/network and invokes them by name
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from actions.agent_kit import AgentKit
from common.errors import ErrorCode, TensaiError
from common.formatting import object_to_string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/actions", tags=["Actions"])

CLIENT_ERROR_CODES = {ErrorCode.INVALID_INPUT, ErrorCode.INVALID_NETWORK}


def get_agent_kit(request: Request) -> AgentKit:
    kit = getattr(request.app.state, "agent_kit", None)
    if kit is None:
        raise HTTPException(status_code=503, detail="Agent kit not initialized")
    return kit


def _http_error(error: TensaiError) -> HTTPException:
    status = 400 if error.code in CLIENT_ERROR_CODES else 502
    # receipts carry HexBytes
    detail = json.loads(object_to_string(error.to_dict()))
    return HTTPException(status_code=status, detail=detail)


# ===========================================
# ENDPOINTS
# ===========================================

@router.get("")
async def list_actions(kit: AgentKit = Depends(get_agent_kit)):
    """Actions available on the wallet's network."""
    network = kit.wallet.get_network()
    actions = kit.get_actions()
    return {
        "network": {
            "protocol_family": network.protocol_family,
            "network_id": network.network_id,
            "chain_id": network.chain_id,
        },
        "count": len(actions),
        "actions": [action.to_dict() for action in actions],
    }


@router.post("/{name}")
async def invoke_action(
    name: str,
    args: Optional[Dict[str, Any]] = Body(default=None),
    kit: AgentKit = Depends(get_agent_kit)
):
    """Invoke an action with a JSON body of arguments."""
    try:
        result = await kit.invoke(name, args or {})
    except TensaiError as e:
        logger.warning(f"[ActionsAPI] {name} failed: {e.code.value} {e.message}")
        raise _http_error(e)

    try:
        payload = json.loads(result)
    except (TypeError, ValueError):
        payload = result
    return {"action": name, "result": payload}
