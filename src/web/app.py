"""
FastAPI app serving the rewards lookup form.

Routes
------
GET  /                -> HTML form (pool select + epoch input)
POST /api/rewards     -> {"poolId": str, "epoch": int|str}
POST /api/all-pools   -> {"epoch": int|str}

Responses
---------
200 -> {"success": true, "results": [{poolName, poolId, result, formattedValue, error}]}
400 -> {"success": false, "error": "..."}   missing pool / missing or invalid epoch
500 -> {"success": false, "error": "..."}   single-pool call failed

For /api/all-pools, per-pool failures are reported inline (error set on the
item) and the response is still 200.

The handlers only do HTTP plumbing; the query loop lives in
src.orchestration.rewards_query.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from src.config.settings import Settings
from src.contracts.abi import COMPUTE_REWARDS_ABI
from src.orchestration.rewards_query import (
    parse_epoch,
    query_pool_rewards,
    query_single_pool,
)
from src.venues.base import ContractCaller
from src.web.schemas import (
    AllPoolsRequest,
    ErrorResponse,
    RewardResultResponse,
    RewardsRequest,
    RewardsResponse,
)
from src.web.templates import render_index_page

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _success(results) -> JSONResponse:
    body = RewardsResponse(
        results=[RewardResultResponse.from_query_result(r) for r in results]
    )
    return JSONResponse(content=body.model_dump(by_alias=True))


def _parse_epoch_or_none(value) -> tuple[Optional[int], Optional[str]]:
    try:
        return parse_epoch(value), None
    except ValueError as e:
        return None, str(e)


def create_app(settings: Settings, caller: Optional[ContractCaller] = None) -> FastAPI:
    """
    Build the web app.

    Args:
        settings: Application settings (pools for the form, RPC for the
                  default caller).
        caller: Contract caller to use. Defaults to a Web3ContractCaller bound
                to computeRewards on the configured contract.
    """
    if caller is None:
        from src.venues.web3_contract import Web3ContractCaller

        caller = Web3ContractCaller(settings.rpc, COMPUTE_REWARDS_ABI)

    pools = settings.pools.entries
    index_html = render_index_page(pools)

    application = FastAPI(title="Stryke Rewards Lookup", version="1.0.0")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    @application.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(content=index_html)

    @application.post("/api/rewards")
    def rewards(request: RewardsRequest) -> JSONResponse:
        pool_id = (request.pool_id or "").strip()
        if not pool_id:
            return _error(status.HTTP_400_BAD_REQUEST, "Pool ID is required")

        epoch, epoch_error = _parse_epoch_or_none(request.epoch)
        if epoch_error:
            return _error(status.HTTP_400_BAD_REQUEST, epoch_error)

        logger.info("Web request: pool %s, epoch %d", pool_id, epoch)
        result = query_single_pool(caller, pool_id, epoch, pools=pools)
        if not result.ok:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, result.error)

        return _success([result])

    @application.post("/api/all-pools")
    def all_pools(request: AllPoolsRequest) -> JSONResponse:
        epoch, epoch_error = _parse_epoch_or_none(request.epoch)
        if epoch_error:
            return _error(status.HTTP_400_BAD_REQUEST, epoch_error)

        logger.info("Web request: all pools, epoch %d", epoch)
        return _success(query_pool_rewards(caller, pools, epoch))

    return application
