"""FastAPI app exposing solar, circulation and climate-classification endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, model_validator

from geolab.astro.solar import (
    AXIAL_TILT_DEFAULT,
    arctic_circle_latitude,
    day_of_year,
    days_in_month,
    daylight_hours,
    describe_axial_tilt,
    doy_to_date,
    solar_declination,
    solar_noon_altitude,
    subsolar_point,
    tropic_latitude,
)
from geolab.circulation.atmospheric import (
    PRESSURE_ZONES,
    get_cell_boundaries,
    month_to_day_of_year,
    pressure_zone_latitude,
    surface_wind_direction,
    wind_zone_at,
)
from geolab.climate.flowchart import EDGES, GROUP_REGIONS, NODES
from geolab.climate.koppen import KOPPEN_GROUP_COLORS, evaluate_koppen
from geolab.contracts import ClimateDataError, InvalidInputError, MonthlyNormals
from geolab.ingest.factory import create_climate_provider, resolve_mode
from geolab.ingest.presets import PRESET_CITIES

_LOGGER = logging.getLogger(__name__)


class DateSelection(BaseModel):
    """Either a day of year or a calendar month (and optional day)."""

    day_of_year: int | None = Field(default=None, ge=1, le=366)
    month: int | None = Field(default=None, ge=1, le=12)
    day: int | None = Field(default=None, ge=1, le=31)

    @model_validator(mode="after")
    def validate_date(self) -> "DateSelection":
        """Require exactly one way of naming the date, and a real calendar day."""
        if (self.day_of_year is None) == (self.month is None):
            raise ValueError("provide either day_of_year or month")
        if self.month is None:
            if self.day is not None:
                raise ValueError("day requires month")
        elif self.day is not None and self.day > days_in_month(self.month):
            raise ValueError(f"month {self.month} has only {days_in_month(self.month)} days")
        return self

    def resolve_day_of_year(self) -> int:
        """Return the selected day of year; a bare month means mid-month."""
        if self.month is not None:
            if self.day is None:
                return month_to_day_of_year(self.month)
            return day_of_year(self.month, self.day)
        if self.day_of_year is None:
            raise ValueError("provide either day_of_year or month")
        return self.day_of_year


class SolarRequest(DateSelection):
    """Request schema for solar geometry at one latitude and date."""

    latitude: float = Field(ge=-90.0, le=90.0)
    hour_utc: float = Field(default=12.0, ge=0.0, le=24.0)
    axial_tilt: float = Field(default=AXIAL_TILT_DEFAULT, ge=0.0, le=90.0)


class SolarResponse(BaseModel):
    """Response schema for solar geometry."""

    day_of_year: int
    month: int
    day: int
    declination: float
    daylight_hours: float
    noon_altitude: float
    subsolar_lon: float
    subsolar_lat: float
    tropic_latitude: float
    arctic_circle_latitude: float
    tilt_description: str


class CirculationRequest(DateSelection):
    """Request schema for circulation state, optionally sampled at one latitude."""

    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)


class CirculationResponse(BaseModel):
    """Response schema for circulation state."""

    day_of_year: int
    boundaries: dict[str, float]
    pressure_zones: dict[str, float]
    wind_zone: str | None = None
    wind_direction: float | None = None


class KoppenRequest(BaseModel):
    """Request schema for classifying twelve months of normals."""

    temperature: list[float] = Field(min_length=12, max_length=12)
    precipitation: list[float] = Field(min_length=12, max_length=12)
    latitude: float = Field(ge=-90.0, le=90.0)


class KoppenResponse(BaseModel):
    """Classification result together with its flowchart trace."""

    result: dict[str, Any]
    trace: dict[str, Any]


class NormalsRequest(BaseModel):
    """Request schema for fetching and classifying normals at a point."""

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)


class NormalsResponse(KoppenResponse):
    """Fetched normals plus classification."""

    normals: dict[str, list[float]]


def _classify(normals: MonthlyNormals, latitude: float) -> tuple[dict[str, Any], dict[str, Any]]:
    result, trace = evaluate_koppen(normals.temperature, normals.precipitation, latitude)
    return result.to_dict(), trace.to_dict()


def create_app(provider_mode: str | None = None) -> FastAPI:
    """Create and configure the FastAPI app.

    The climate provider is closed when the application shuts down.
    """
    mode = resolve_mode(provider_mode)
    provider = create_climate_provider(mode)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        _LOGGER.debug("closing %s climate provider", mode)
        app.state.climate_provider.close()

    app = FastAPI(title="Geolab API", version="0.1.0", lifespan=lifespan)
    app.state.provider_mode = mode
    app.state.climate_provider = provider
    _LOGGER.info("geolab api using %s climate provider", mode)

    @app.post("/solar", response_model=SolarResponse)
    def post_solar(payload: SolarRequest) -> SolarResponse:
        """Compute solar geometry for one latitude and date."""
        doy = payload.resolve_day_of_year()
        month, day = doy_to_date(doy)
        tilt = payload.axial_tilt
        lon, lat = subsolar_point(doy, payload.hour_utc, tilt)
        return SolarResponse(
            day_of_year=doy,
            month=month,
            day=day,
            declination=solar_declination(doy, tilt),
            daylight_hours=daylight_hours(payload.latitude, doy, tilt),
            noon_altitude=solar_noon_altitude(payload.latitude, doy, tilt),
            subsolar_lon=lon,
            subsolar_lat=lat,
            tropic_latitude=tropic_latitude(tilt),
            arctic_circle_latitude=arctic_circle_latitude(tilt),
            tilt_description=describe_axial_tilt(tilt),
        )

    @app.post("/circulation", response_model=CirculationResponse)
    def post_circulation(payload: CirculationRequest) -> CirculationResponse:
        """Return cell boundaries and pressure belts for a date."""
        doy = payload.resolve_day_of_year()
        response = CirculationResponse(
            day_of_year=doy,
            boundaries=get_cell_boundaries(doy).to_dict(),
            pressure_zones={zone.id: pressure_zone_latitude(zone, doy) for zone in PRESSURE_ZONES},
        )
        if payload.latitude is not None:
            response.wind_zone = wind_zone_at(payload.latitude, doy).id
            response.wind_direction = surface_wind_direction(payload.latitude, doy)
        return response

    @app.post("/koppen", response_model=KoppenResponse)
    def post_koppen(payload: KoppenRequest) -> KoppenResponse:
        """Classify monthly normals and trace the decision path."""
        try:
            normals = MonthlyNormals(temperature=payload.temperature, precipitation=payload.precipitation)
        except InvalidInputError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        result, trace = _classify(normals, payload.latitude)
        return KoppenResponse(result=result, trace=trace)

    @app.get("/koppen/flowchart")
    def get_flowchart() -> dict[str, Any]:
        """Return the static decision diagram for client-side rendering."""
        return {
            "nodes": [node.to_dict() for node in NODES],
            "edges": [edge.to_dict() for edge in EDGES],
            "group_regions": [
                {
                    "group": region.group,
                    "label": region.label,
                    "x": region.x,
                    "y": region.y,
                    "width": region.width,
                    "height": region.height,
                    "color": KOPPEN_GROUP_COLORS[region.group],
                }
                for region in GROUP_REGIONS
            ],
        }

    @app.post("/normals", response_model=NormalsResponse)
    def post_normals(payload: NormalsRequest) -> NormalsResponse:
        """Fetch 1991-2020 normals for a point and classify them."""
        try:
            normals = provider.get_monthly_normals(payload.lat, payload.lon)
        except ClimateDataError as exc:
            _LOGGER.warning("normals unavailable for %.2f,%.2f: %s", payload.lat, payload.lon, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        result, trace = _classify(normals, payload.lat)
        return NormalsResponse(normals=normals.to_dict(), result=result, trace=trace)

    @app.get("/cities")
    def get_cities(q: str = "") -> list[dict[str, Any]]:
        """Search places by name; an empty query lists the preset cities."""
        if not q.strip():
            return [preset.location.to_dict() for preset in PRESET_CITIES]
        try:
            cities = provider.search_cities(q)
        except ClimateDataError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return [city.to_dict() for city in cities]

    return app


app = create_app()
