"""Bridge-level routes: UPnP description document and pairing."""

from fastapi import APIRouter, Request, Response

from .models import PairingResult

USERNAME = "foo"

router = APIRouter(tags=["bridge"])


def get_description(request: Request):
    """UPnP description fetched by clients after SSDP discovery.

    Mounted by create_app() at the configured description path.
    """
    bridge = request.app.state.bridge
    return Response(content=bridge.description(), media_type="text/xml")


@router.post("/api", response_model=list[PairingResult])
def create_user():
    """Pairing stub — every client is accepted under the same user name."""
    return [{"success": {"username": USERNAME}}]
