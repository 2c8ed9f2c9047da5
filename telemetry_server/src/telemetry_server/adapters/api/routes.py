# telemetry_server/adapters/api/routes.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from telemetry_core.application.manage_maintenance import list_maintenance_history
from telemetry_core.application.query_readings import get_parameter_history, get_sensor_locations
from telemetry_core.application.refresh_predictions import summarize_predictions
from telemetry_core.domain.models import ParameterId

from telemetry_server.adapters.api.schemas import (
    HistoryOut,
    MaintenanceHistoryOut,
    MaintenanceIn,
    MaintenanceOut,
    PredictionsOut,
    SeriesPointOut,
    SnapshotOut,
)
from telemetry_server.live_view import LiveView

router = APIRouter()


def get_live_view(request: Request) -> LiveView:
    return request.app.state.live_view


@router.get("/ping")
def ping():
    return {"status": "ok"}


@router.get("/snapshot", response_model=SnapshotOut)
def snapshot(view: LiveView = Depends(get_live_view)):
    return SnapshotOut.from_domain(view.snapshot())


@router.get("/predictions", response_model=PredictionsOut)
def predictions(view: LiveView = Depends(get_live_view)):
    data = view.predictions()
    return PredictionsOut(predictions=data, summary=summarize_predictions(data))


@router.get("/locations", response_model=list[str])
def locations(view: LiveView = Depends(get_live_view)):
    return get_sensor_locations(view.store)


@router.get("/history/{parameter}", response_model=HistoryOut)
def history(
    parameter: str,
    device_id: Optional[str] = None,
    view: LiveView = Depends(get_live_view),
):
    try:
        param = ParameterId(parameter)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown parameter {parameter!r}")
    chosen, points = get_parameter_history(
        view.store,
        param,
        device_id or view.requested_device,
        view.options.default_device_id,
    )
    return HistoryOut(
        parameter=param.value,
        device_id=chosen,
        points=[SeriesPointOut.from_domain(p) for p in points],
    )


@router.get("/maintenance", response_model=MaintenanceOut)
def get_maintenance(view: LiveView = Depends(get_live_view)):
    return MaintenanceOut.from_domain(view.maintenance_config())


@router.put("/maintenance", response_model=MaintenanceOut)
def put_maintenance(body: MaintenanceIn, view: LiveView = Depends(get_live_view)):
    config = body.to_domain()
    record = view.update_maintenance(config)
    return MaintenanceOut.from_domain(config, updated_at=record.get("updatedAt"))


@router.get("/maintenance/history", response_model=list[MaintenanceHistoryOut])
def maintenance_history(view: LiveView = Depends(get_live_view)):
    return [MaintenanceHistoryOut.from_domain(e) for e in list_maintenance_history(view.store)]
