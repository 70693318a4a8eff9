"""Subscription plans and per-user subscriptions."""

import logging

from notive.domain.entities import PLANS, ApiErrorCode, Plan, Subscription
from notive.domain.exceptions import ValidationException
from notive.domain.ports import ISubscriptionRepository

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Lists the static plans and records which one a user picked."""

    def __init__(self, subscriptions: ISubscriptionRepository) -> None:
        self._subscriptions = subscriptions

    @staticmethod
    def list_plans() -> list[Plan]:
        return list(PLANS)

    async def subscribe(self, user_id: int, plan: str | None) -> Subscription:
        """Create or switch the user's subscription.

        Raises:
            ValidationException: INVALID_PLAN for anything but a known plan name
        """
        allowed = {p.name for p in PLANS}
        if plan is None or plan not in allowed:
            raise ValidationException(code=ApiErrorCode.INVALID_PLAN)

        subscription = await self._subscriptions.upsert(user_id, plan)
        logger.info("User %s subscribed to %s", user_id, plan)
        return subscription

    async def get_subscription(self, user_id: int) -> Subscription | None:
        return await self._subscriptions.get_by_user(user_id)
