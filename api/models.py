"""Pydantic models for the bridge control-plane.

The v1 bridge API wraps every result in a {"success": {...}} object;
these models document that shape in the OpenAPI schema.
"""

from typing import Any

from pydantic import BaseModel, Field


class PairingSuccess(BaseModel):
    username: str = Field(..., description="Whitelisted user name")


class PairingResult(BaseModel):
    """One entry of the POST /api response."""

    success: PairingSuccess


class StateAck(BaseModel):
    """One entry of the PUT .../state response.

    The single key is the resource path of the changed attribute,
    e.g. {"/lights/1/state/on": true}.
    """

    success: dict[str, Any] = Field(default_factory=dict)
