"""Light routes of the v1 bridge API.

Unknown light ids answer 404 with an empty body, as a genuine bridge
does for this API generation. The user segment of the path is accepted
but not checked.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Request, Response

from .models import StateAck

logger = logging.getLogger("huesim.api")

router = APIRouter(prefix="/api/{user}/lights", tags=["lights"])


def _parse_light_id(text: str) -> Optional[int]:
    """Parse a canonical id ("7"); aliases such as "07", "+7" or "0_7" are unknown."""
    if not (text.isascii() and text.isdigit()):
        return None
    if str(int(text)) != text:
        return None
    return int(text)


@router.get("", response_model=dict[str, dict[str, Any]])
def list_lights(user: str, request: Request):
    """All lights keyed by id, in registration order."""
    bridge = request.app.state.bridge
    return {str(light_id): light for light_id, light in bridge.lights().items()}


@router.get("/{light_id}")
def get_light(user: str, light_id: str, request: Request):
    """A single light with its current state."""
    bridge = request.app.state.bridge
    parsed = _parse_light_id(light_id)
    light = bridge.get_light(parsed) if parsed is not None else None
    if light is None:
        return Response(status_code=404)
    return light


@router.put("/{light_id}/state", response_model=list[StateAck])
async def set_light_state(user: str, light_id: str, request: Request):
    """Apply a partial state change, e.g. {"on": true, "bri": 200}.

    The body is read as JSON whatever the Content-Type header says;
    voice assistants send JSON labelled as form data.
    """
    bridge = request.app.state.bridge
    parsed = _parse_light_id(light_id)
    if parsed is None or parsed not in bridge.registry:
        return Response(status_code=404)

    raw = await request.body()
    try:
        state = json.loads(raw) if raw.strip() else {}
    except ValueError:
        logger.warning("Malformed state body for light %s: %r", light_id, raw[:200])
        return Response(status_code=400)
    if not isinstance(state, dict):
        return Response(status_code=400)

    result = bridge.update_state(parsed, state)
    if result is None:
        return Response(status_code=404)
    return result
