"""
backend/score_gateway/routers/pipe.py

Purpose:
    Pipe routes through which the leasing subsystem drives provider
    lifecycle hooks (create, details, delete) and fixture predictions.

Dependencies:
    - score_gateway.registry
    - score_gateway.models.protocol
"""

import json
import logging
from typing import Any, Union

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from score_gateway.errors import PipeError
from score_gateway.models.protocol import Agreement, DetailedOffer, PipeResponseCode, Resource
from score_gateway.providers.base import BaseProvider, ScorePredictionServiceProvider
from score_gateway.registry import DEFAULT_PROVIDER_TAG, get_provider

logger = logging.getLogger("score_gateway.pipe")

router = APIRouter(prefix="/api/pipe", tags=["pipe"])


class CreateResourceRequest(BaseModel):
    agreement: Agreement
    offer: DetailedOffer


class ResourceRequest(BaseModel):
    agreement: Agreement
    offer: DetailedOffer
    resource: Resource


class PredictRequest(BaseModel):
    agreement: Agreement
    resource: Resource
    challenges: Union[str, list[Any]]


class PredictResponse(BaseModel):
    predictions: str
    responseCode: int


def _provider(provider: str = Query(DEFAULT_PROVIDER_TAG, description="Registered provider tag")) -> BaseProvider:
    return get_provider(provider)


@router.post("/resources")
async def create_resource(body: CreateResourceRequest, provider: BaseProvider = Depends(_provider)):
    details = await provider.create(body.agreement, body.offer)
    return details.model_dump() if isinstance(details, BaseModel) else details


@router.post("/resources/details")
async def resource_details(body: ResourceRequest, provider: BaseProvider = Depends(_provider)):
    details = await provider.get_details(body.agreement, body.offer, body.resource)
    return details.model_dump() if isinstance(details, BaseModel) else details


@router.post("/resources/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resource(body: ResourceRequest, provider: BaseProvider = Depends(_provider)):
    await provider.delete(body.agreement, body.offer, body.resource)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/predictions", response_model=PredictResponse)
async def predict_fixture_results(body: PredictRequest, provider: BaseProvider = Depends(_provider)):
    """Forward fixture challenges to the configured prediction API."""
    if not isinstance(provider, ScorePredictionServiceProvider):
        raise PipeError("Provider does not serve predictions", code=PipeResponseCode.BAD_REQUEST)
    challenges = body.challenges if isinstance(body.challenges, str) else json.dumps(body.challenges)
    result = await provider.predict_fixture_results(body.agreement, body.resource, challenges)
    return PredictResponse(predictions=result["predictions"], responseCode=int(result["responseCode"]))


@router.get("/configuration-schema")
async def configuration_schema(provider: BaseProvider = Depends(_provider)):
    return provider.available_virtual_provider_configurations
