"""API schemas for plans and subscriptions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notive.domain.entities import Plan, Subscription


class PlanResponse(BaseModel):
    name: str
    price: str
    tokens: str
    storage: str

    @classmethod
    def from_entity(cls, plan: Plan) -> "PlanResponse":
        return cls(**plan.to_dict())


class PlansResponse(BaseModel):
    success: bool = True
    plans: list[PlanResponse]


class SubscribeRequest(BaseModel):
    """Body of POST /subscribe."""

    plan: str | None = Field(default=None, description="Lite, Standard or Pro")


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="userId")
    plan: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    @classmethod
    def from_entity(cls, subscription: Subscription) -> "SubscriptionResponse":
        return cls(
            user_id=subscription.user_id,
            plan=subscription.plan,
            created_at=subscription.created_at,
            updated_at=subscription.updated_at,
        )


class SubscriptionEnvelope(BaseModel):
    """``subscription`` is null when the user never subscribed."""

    success: bool = True
    subscription: SubscriptionResponse | None = None
