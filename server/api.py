"""FastAPI server exposing the beauty store to the UI layer."""

from datetime import date
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Path, Query, Response
from pydantic import BaseModel, Field

from beauty_app.app import BeautyTrackerApp
from logic.validation import CosmeticInput, DayUsageInput, LookInput, StatsInput
from tools.beauty_tools import BeautyTools
from tools.day_keys import parse_day_key

app = FastAPI(title="Beauty Tracker", version="0.1.0")

_beauty_app: BeautyTrackerApp | None = None


class DayUsageBody(BaseModel):
    """Request payload replacing both usage lists for one day."""

    look_ids: list[str] = Field(default_factory=list, description="Looks used that day")
    cosmetic_ids: list[str] = Field(default_factory=list, description="Cosmetics used that day")


def get_beauty_app() -> BeautyTrackerApp:
    """Return the process-wide app, building it on first use."""

    global _beauty_app
    if _beauty_app is None:
        _beauty_app = BeautyTrackerApp()
    return _beauty_app


def get_tools(beauty_app: BeautyTrackerApp = Depends(get_beauty_app)) -> BeautyTools:
    return beauty_app.tools


def _require_day_key(day_key: str) -> str:
    if parse_day_key(day_key) is None:
        raise HTTPException(status_code=422, detail=f"'{day_key}' is not a YYYY-MM-DD day key")
    return day_key


def _found(result, what: str):
    if result is None:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return result


@app.get("/healthz")
def healthcheck(beauty_app: BeautyTrackerApp = Depends(get_beauty_app)) -> dict:
    """Lightweight readiness probe."""

    return {
        "status": "ok",
        "service": "beauty-tracker",
        "environment": beauty_app.config.environment or "local",
        "storage_backend": beauty_app.config.storage_backend,
    }


# Cosmetics


@app.get("/cosmetics")
def list_cosmetics(
    status: str | None = Query(None, description="Filter by status, e.g. 'In use'"),
    tools: BeautyTools = Depends(get_tools),
) -> list:
    try:
        return tools.list_cosmetics(status=status)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.post("/cosmetics", status_code=201)
def add_cosmetic(payload: CosmeticInput, tools: BeautyTools = Depends(get_tools)) -> dict:
    created = tools.add_cosmetic(payload)
    if created is None:
        raise HTTPException(status_code=422, detail="name must not be blank")
    return created


@app.get("/cosmetics/{cosmetic_id}")
def get_cosmetic(cosmetic_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return _found(tools.get_cosmetic(cosmetic_id), "cosmetic")


@app.get("/cosmetics/{cosmetic_id}/photo")
def get_cosmetic_photo(cosmetic_id: str, tools: BeautyTools = Depends(get_tools)) -> Response:
    photo = _found(tools.get_cosmetic_photo(cosmetic_id), "photo")
    return Response(content=photo, media_type="application/octet-stream")


@app.put("/cosmetics/{cosmetic_id}")
def update_cosmetic(cosmetic_id: str, payload: CosmeticInput, tools: BeautyTools = Depends(get_tools)) -> dict:
    _found(tools.get_cosmetic(cosmetic_id), "cosmetic")
    updated = tools.update_cosmetic(cosmetic_id, payload)
    if updated is None:
        raise HTTPException(status_code=422, detail="name must not be blank")
    return updated


@app.delete("/cosmetics/{cosmetic_id}")
def delete_cosmetic(cosmetic_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    if not tools.delete_cosmetic(cosmetic_id):
        raise HTTPException(status_code=404, detail="cosmetic not found")
    return {"status": "deleted", "id": cosmetic_id}


# Looks


@app.get("/looks")
def list_looks(tools: BeautyTools = Depends(get_tools)) -> list:
    return tools.list_looks()


@app.post("/looks", status_code=201)
def add_look(payload: LookInput, tools: BeautyTools = Depends(get_tools)) -> dict:
    created = tools.add_look(payload)
    if created is None:
        raise HTTPException(status_code=422, detail="title must not be blank")
    return created


@app.get("/looks/{look_id}")
def get_look(look_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return _found(tools.get_look(look_id), "look")


@app.put("/looks/{look_id}")
def update_look(look_id: str, payload: LookInput, tools: BeautyTools = Depends(get_tools)) -> dict:
    _found(tools.get_look(look_id), "look")
    updated = tools.update_look(look_id, payload)
    if updated is None:
        raise HTTPException(status_code=422, detail="title must not be blank")
    return updated


@app.delete("/looks/{look_id}")
def delete_look(look_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    if not tools.delete_look(look_id):
        raise HTTPException(status_code=404, detail="look not found")
    return {"status": "deleted", "id": look_id}


# Usage


@app.get("/usage")
def usage_between(start: date, end: date, tools: BeautyTools = Depends(get_tools)) -> list:
    if end < start:
        raise HTTPException(status_code=422, detail="end cannot precede start")
    return tools.usage_between(start, end)


@app.get("/usage/{day_key}")
def get_day(day_key: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.get_day(_require_day_key(day_key))


@app.put("/usage/{day_key}")
def set_day(day_key: str, body: DayUsageBody, tools: BeautyTools = Depends(get_tools)) -> dict:
    payload = DayUsageInput(day_key=_require_day_key(day_key), look_ids=body.look_ids, cosmetic_ids=body.cosmetic_ids)
    return tools.set_day(payload)


@app.delete("/usage/{day_key}")
def clear_day(day_key: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.clear_day(_require_day_key(day_key))


@app.post("/usage/{day_key}/looks/{look_id}")
def add_look_to_day(day_key: str, look_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.add_look_to_day(_require_day_key(day_key), look_id)


@app.delete("/usage/{day_key}/looks/{look_id}")
def remove_look_from_day(day_key: str, look_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.remove_look_from_day(_require_day_key(day_key), look_id)


@app.post("/usage/{day_key}/cosmetics/{cosmetic_id}")
def add_cosmetic_to_day(day_key: str, cosmetic_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.add_cosmetic_to_day(_require_day_key(day_key), cosmetic_id)


@app.delete("/usage/{day_key}/cosmetics/{cosmetic_id}")
def remove_cosmetic_from_day(day_key: str, cosmetic_id: str, tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.remove_cosmetic_from_day(_require_day_key(day_key), cosmetic_id)


@app.get("/calendar/{year}/{month}")
def calendar_markers(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    tools: BeautyTools = Depends(get_tools),
) -> dict:
    return tools.calendar_markers(year, month)


@app.get("/today")
def today(tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.today_summary()


# Statistics


@app.get("/statistics")
def statistics(
    stats_range: Literal["week", "month"] = Query("week", alias="range"),
    tools: BeautyTools = Depends(get_tools),
) -> dict:
    return tools.statistics(StatsInput(range=stats_range))


@app.post("/reset")
def reset(tools: BeautyTools = Depends(get_tools)) -> dict:
    return tools.reset_all()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=8080, reload=False)
