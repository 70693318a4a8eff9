"""Plan listing and subscription endpoints."""

from fastapi import APIRouter, Depends

from notive.api.dependencies import get_current_user_id, get_subscription_service
from notive.api.schemas.subscriptions import (
    PlanResponse,
    PlansResponse,
    SubscribeRequest,
    SubscriptionEnvelope,
    SubscriptionResponse,
)
from notive.application.services.subscription_service import SubscriptionService

router = APIRouter()


# Public on purpose, the sign-up flow shows plans before an account exists.
@router.get("/plans", response_model=PlansResponse)
async def list_plans() -> PlansResponse:
    return PlansResponse(
        plans=[PlanResponse.from_entity(plan) for plan in SubscriptionService.list_plans()]
    )


@router.post("/subscribe", response_model=SubscriptionEnvelope)
async def subscribe(
    body: SubscribeRequest,
    user_id: int = Depends(get_current_user_id),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionEnvelope:
    """Create or switch the caller's subscription."""
    subscription = await subscriptions.subscribe(user_id, body.plan)
    return SubscriptionEnvelope(subscription=SubscriptionResponse.from_entity(subscription))


@router.get("/subscription", response_model=SubscriptionEnvelope)
async def get_subscription(
    user_id: int = Depends(get_current_user_id),
    subscriptions: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionEnvelope:
    subscription = await subscriptions.get_subscription(user_id)
    return SubscriptionEnvelope(
        subscription=SubscriptionResponse.from_entity(subscription) if subscription else None
    )
