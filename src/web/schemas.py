"""
Request and response models for the rewards web API.

Field names on the wire are camelCase to match the browser form
(poolId, poolName, formattedValue).
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.data.schemas import QueryResult


class RewardsRequest(BaseModel):
    """Body of POST /api/rewards. Both fields are checked by the handler."""

    model_config = ConfigDict(populate_by_name=True)

    pool_id: Optional[str] = Field(default=None, alias="poolId")
    epoch: Optional[Union[int, str]] = None


class AllPoolsRequest(BaseModel):
    """Body of POST /api/all-pools."""

    epoch: Optional[Union[int, str]] = None


class RewardResultResponse(BaseModel):
    """One pool outcome. Exactly one of formattedValue / error is set."""

    model_config = ConfigDict(populate_by_name=True)

    pool_name: str = Field(..., alias="poolName")
    pool_id: str = Field(..., alias="poolId")
    result: Optional[str] = None
    formatted_value: Optional[str] = Field(default=None, alias="formattedValue")
    error: Optional[str] = None

    @classmethod
    def from_query_result(cls, query_result: QueryResult) -> "RewardResultResponse":
        return cls(
            pool_name=query_result.pool_name,
            pool_id=query_result.pool_id,
            result=query_result.raw_result,
            formatted_value=query_result.formatted_value,
            error=query_result.error,
        )


class RewardsResponse(BaseModel):
    success: bool = True
    results: list[RewardResultResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
