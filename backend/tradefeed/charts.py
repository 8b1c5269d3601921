"""Stateless chart snapshot endpoint with synthetic series data."""

from __future__ import annotations

import random

from fastapi import APIRouter
from pydantic import BaseModel

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
COUNTRIES = ["USA", "China", "India", "Indonesia", "Brazil", "Pakistan", "Nigeria", "Bangladesh", "Russia", "Mexico"]
ENERGY_SOURCES = ["Coal", "Natural Gas", "Nuclear", "Hydro", "Wind", "Solar", "Other Renewables"]
ECONOMIES = ["USA", "China", "India", "Japan", "Germany", "UK", "France", "Brazil", "Italy", "Canada"]


class Axis(BaseModel):
    type: str
    name: str | None = None
    data: list[str] | None = None


class Series(BaseModel):
    name: str
    type: str
    data: list[float] | list[list[float]]


class ChartData(BaseModel):
    title: str
    x_axis: Axis | None = None
    y_axis: Axis | None = None
    series: list[Series]
    legend: list[str] | None = None


def build_chart(chart_type: str, rng: random.Random | None = None) -> ChartData:
    """One complete chart snapshot. Unknown types fall back to a line chart."""
    rng = rng or random.Random()

    if chart_type == "bar":
        return ChartData(
            title="Population by Country (Millions)",
            x_axis=Axis(type="category", data=COUNTRIES),
            y_axis=Axis(type="value"),
            series=[Series(name="Population", type="bar", data=[rng.uniform(100, 1400) for _ in COUNTRIES])],
        )

    if chart_type == "pie":
        return ChartData(
            title="Energy Consumption by Source",
            series=[Series(name="Energy Source", type="pie", data=[rng.uniform(5, 30) for _ in ENERGY_SOURCES])],
            legend=ENERGY_SOURCES,
        )

    if chart_type == "scatter":
        points = [[10_000 + rng.uniform(0, 60_000), 60 + rng.uniform(0, 25)] for _ in ECONOMIES]
        return ChartData(
            title="GDP vs Life Expectancy",
            x_axis=Axis(type="value", name="GDP per Capita ($)"),
            y_axis=Axis(type="value", name="Life Expectancy (years)"),
            series=[Series(name="Countries", type="scatter", data=points)],
        )

    return ChartData(
        title="Monthly Temperature and Rainfall",
        x_axis=Axis(type="category", data=MONTHS),
        y_axis=Axis(type="value", name="Temperature (°C)"),
        series=[
            Series(name="Temperature", type="line", data=[10 + rng.uniform(0, 20) for _ in MONTHS]),
            Series(name="Rainfall", type="line", data=[rng.uniform(0, 100) for _ in MONTHS]),
        ],
        legend=["Temperature", "Rainfall"],
    )


def create_charts_router() -> APIRouter:
    router = APIRouter(prefix="/charts", tags=["charts"])

    @router.get("/data", response_model=ChartData, response_model_exclude_none=True)
    async def chart_data(type: str = "line") -> ChartData:
        return build_chart(type)

    return router
