"""Tests for SubscriptionService."""

from unittest.mock import AsyncMock

import pytest

from notive.application.services.subscription_service import SubscriptionService
from notive.domain.entities import ApiErrorCode, Subscription
from notive.domain.exceptions import ValidationException
from notive.domain.ports import ISubscriptionRepository


@pytest.fixture
def subscriptions() -> AsyncMock:
    return AsyncMock(spec=ISubscriptionRepository)


def test_plans_are_static() -> None:
    plans = SubscriptionService.list_plans()

    assert [p.name for p in plans] == ["Lite", "Standard", "Pro"]
    assert plans[0].price == "$17/mo"
    assert plans[2].storage == "Unlimited"


@pytest.mark.parametrize("plan", ["Standard", "Pro", "Lite"])
async def test_subscribe_known_plan(subscriptions: AsyncMock, plan: str) -> None:
    subscriptions.upsert.return_value = Subscription(user_id=3, plan=plan)

    result = await SubscriptionService(subscriptions).subscribe(3, plan)

    assert result.plan == plan
    subscriptions.upsert.assert_awaited_once_with(3, plan)


@pytest.mark.parametrize("plan", [None, "", "Enterprise", "pro"])
async def test_subscribe_unknown_plan(subscriptions: AsyncMock, plan: str | None) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await SubscriptionService(subscriptions).subscribe(3, plan)

    assert exc_info.value.code == ApiErrorCode.INVALID_PLAN
    subscriptions.upsert.assert_not_awaited()


async def test_get_subscription_none(subscriptions: AsyncMock) -> None:
    subscriptions.get_by_user.return_value = None
    assert await SubscriptionService(subscriptions).get_subscription(3) is None
