"""
backend/score_gateway/models/protocol.py

Purpose:
    Leasing-protocol entities read by the gateway provider: agreements,
    offers, resources, and the enums shared with the surrounding subsystem.

Dependencies:
    - pydantic
"""

from enum import Enum, IntEnum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

NUMBER_OF_PREDICTIONS_PARAM = "Number of Predictions"


class PipeResponseCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500


class DeploymentStatus(str, Enum):
    RUNNING = "Running"
    DEPLOYING = "Deploying"
    CLOSED = "Closed"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class Agreement(BaseModel):
    """Leasing relationship between a consumer and one offer of this provider."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    offer_id: int = Field(alias="offerId")
    user_address: str = Field(default="", alias="userAddress")
    provider_address: Optional[str] = Field(default=None, alias="providerAddress")
    status: Optional[str] = None


class DetailedOffer(BaseModel):
    """Offer with its resolved details. `details` is a mapping when structured."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    details: Union[dict[str, Any], str, None] = None


class Resource(BaseModel):
    """Concrete leased instance created under an agreement."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    name: str = ""
    deployment_status: DeploymentStatus = Field(
        default=DeploymentStatus.UNKNOWN, alias="deploymentStatus"
    )
    details: dict[str, Any] = Field(default_factory=dict)
