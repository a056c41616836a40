"""Kafka REST proxy response types."""

from pydantic import BaseModel, ConfigDict


class BrokerListResponse(BaseModel):
    """
    Response from GET /brokers.

    Example response:
    {"brokers": [0, 1, 2]}
    """

    model_config = ConfigDict(extra="allow")

    brokers: list[int]
