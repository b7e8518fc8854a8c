# src/zipreach/api/http.py
from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query

from zipreach.adapters.config import config
from zipreach.adapters.housing_source import JsonHousingDataSource
from zipreach.domain.affordability import AffordabilityInputs
from zipreach.domain.mortgage import (
    calculate_full_monthly_payment,
    calculate_max_home_price,
    get_effective_max_price,
    tier_breakdown,
)
from zipreach.domain.ports import HousingDataProvider
from zipreach.domain.states import state_name
from zipreach.services.housing_join import affordable_for_isochrone
from zipreach.services.results import summarize, visible_markers
from zipreach.services.state_aggregation import affordable_nationwide, drill_down_state
from .schemas import (
    CommuteRequest,
    CommuteResponse,
    MaxPriceResponse,
    NationwideResponse,
    StateDrillDownResponse,
    TierRequest,
    TierResponse,
)

app = FastAPI(title="zipreach")

# single data source (and cache) per process
_data_source = JsonHousingDataSource()


def get_data_source() -> HousingDataProvider:
    return _data_source


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "env": config.ENV}


@app.post("/max-price", response_model=MaxPriceResponse)
def max_price_endpoint(inputs: AffordabilityInputs) -> MaxPriceResponse:
    max_price = calculate_max_home_price(inputs)
    return MaxPriceResponse(
        max_home_price=max_price,
        effective_max_price=get_effective_max_price(inputs),
        monthly_payment=calculate_full_monthly_payment(max_price, inputs) if max_price > 0 else None,
    )


@app.post("/tier", response_model=TierResponse)
def tier_endpoint(payload: TierRequest) -> TierResponse:
    a = tier_breakdown(payload.home_price, payload.inputs)
    return TierResponse(
        tier=a.tier,
        base_tier=a.base_tier,
        dti_ratio=a.dti_ratio,
        remaining_cash_flow=a.cash_flow.remaining if a.cash_flow else None,
        cash_flow_pct=a.cash_flow.pct if a.cash_flow else None,
        applied_rules=a.applied_rules,
        monthly_payment=a.payment,
    )


@app.post("/commute", response_model=CommuteResponse, response_model_by_alias=False)
def commute_endpoint(
    payload: CommuteRequest,
    source: HousingDataProvider = Depends(get_data_source),
) -> CommuteResponse:
    try:
        result = affordable_for_isochrone(source.load(), payload.isochrone, payload.inputs)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return CommuteResponse(
        stats=result.stats,
        markers=visible_markers(result.markers, payload.show_unaffordable),
        summary=summarize(result.stats, payload.inputs),
    )


@app.post("/nationwide", response_model=NationwideResponse, response_model_by_alias=False)
def nationwide_endpoint(
    inputs: AffordabilityInputs,
    source: HousingDataProvider = Depends(get_data_source),
) -> NationwideResponse:
    result = affordable_nationwide(source.load(), inputs)
    return NationwideResponse(states=result.states, summary=summarize(result.stats, inputs))


@app.post(
    "/nationwide/states/{state}",
    response_model=StateDrillDownResponse,
    response_model_by_alias=False,
)
def state_drill_down_endpoint(
    state: str,
    inputs: AffordabilityInputs,
    show_unaffordable: bool = Query(default=True),
    source: HousingDataProvider = Depends(get_data_source),
) -> StateDrillDownResponse:
    dataset = source.load()
    nationwide = affordable_nationwide(dataset, inputs)
    drill = drill_down_state(nationwide.all_entries, state, inputs, meta=dataset.meta)
    return StateDrillDownResponse(
        state=drill.state,
        state_name=state_name(drill.state),
        stats=drill.stats,
        markers=visible_markers(drill.markers, show_unaffordable),
        summary=summarize(drill.stats, inputs),
    )
