"""
backend/score_gateway/models/resource.py

Purpose:
    Resource details blob for score prediction resources, including the
    usage counters reported back to the leasing subsystem.

Dependencies:
    - pydantic
    - score_gateway.models.protocol
"""

from pydantic import BaseModel, ConfigDict

from score_gateway.models.protocol import DeploymentStatus


class ScorePredictionResourceDetails(BaseModel):
    """Details stored with a prediction resource.

    The surrounding lifecycle logic keeps Predictions_Count at or below
    Predictions_Allowance_Count; this model only exposes the counters.
    """
    model_config = ConfigDict(extra="allow", use_enum_values=True)

    status: DeploymentStatus = DeploymentStatus.RUNNING
    Predictions_Allowance_Count: int = 0
    Predictions_Count: int = 0

    @property
    def remaining_predictions(self) -> int:
        return max(0, self.Predictions_Allowance_Count - self.Predictions_Count)

    @property
    def allowance_exhausted(self) -> bool:
        return self.Predictions_Count >= self.Predictions_Allowance_Count
