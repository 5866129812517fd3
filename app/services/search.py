"""Property search by city, rent range, rental type and distance.

Criteria become a flat list of (field, operator, value) predicates plus an
optional distance filter, all AND-ed together. Only listings that are both
active and available are ever returned.

The distance filter uses the spherical law of cosines on a sphere of radius R:

    d = R * acos(sin(lat1) * sin(lat2) + cos(lat1) * cos(lat2) * cos(lon2 - lon1))

and keeps rows with d strictly below the search radius. It is normally pushed
down to the database (radians/sin/cos/acos). Where the database lacks those
functions, set push_down_distance=False: the query then narrows by a bounding
box and the exact distance is checked in Python.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, case, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import SearchConfig
from app.exceptions import ValidationFailure
from app.models import Property
from app.schemas.property import PropertySearch

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 5.0


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str  # eq | ieq | ge | le | is_true
    value: Any = None


@dataclass(frozen=True)
class DistanceFilter:
    latitude: float
    longitude: float
    radius: float
    earth_radius: float = EARTH_RADIUS_KM


def great_circle_distance(
    lat1: float, lon1: float, lat2: float, lon2: float, earth_radius: float = EARTH_RADIUS_KM,
) -> float:
    """Distance between two points, in the units of ``earth_radius``."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlambda = math.radians(lon2) - math.radians(lon1)
    cos_angle = math.sin(phi1) * math.sin(phi2) + math.cos(phi1) * math.cos(phi2) * math.cos(dlambda)
    return earth_radius * math.acos(max(-1.0, min(1.0, cos_angle)))


def build_predicates(
    criteria: PropertySearch,
    default_radius: float = DEFAULT_RADIUS_KM,
    earth_radius: float = EARTH_RADIUS_KM,
) -> tuple[list[Predicate], DistanceFilter | None]:
    preds: list[Predicate] = []

    if criteria.city:
        preds.append(Predicate("city", "ieq", criteria.city))
    if criteria.min_rent is not None:
        preds.append(Predicate("rent_amount", "ge", criteria.min_rent))
    if criteria.max_rent is not None:
        preds.append(Predicate("rent_amount", "le", criteria.max_rent))
    if criteria.rental_type is not None:
        preds.append(Predicate("rental_type", "eq", criteria.rental_type))

    preds.append(Predicate("is_active", "is_true"))
    preds.append(Predicate("is_available", "is_true"))

    distance = None
    # A radius without a point is ignored.
    if criteria.latitude is not None and criteria.longitude is not None:
        radius = criteria.radius_km if criteria.radius_km is not None else default_radius
        distance = DistanceFilter(criteria.latitude, criteria.longitude, radius, earth_radius)

    return preds, distance


def compile_predicate(pred: Predicate) -> ColumnElement[bool]:
    column = getattr(Property, pred.field)
    if pred.op == "eq":
        return column == pred.value
    if pred.op == "ieq":
        return func.lower(column) == func.lower(str(pred.value))
    if pred.op == "ge":
        return column >= pred.value
    if pred.op == "le":
        return column <= pred.value
    if pred.op == "is_true":
        return column.is_(True)
    raise ValidationFailure(f"Unknown search operator {pred.op!r}")


def distance_expression(flt: DistanceFilter) -> ColumnElement[float]:
    """SQL form of great_circle_distance, with the query point folded into literals."""
    lat1 = math.radians(flt.latitude)
    lon1 = math.radians(flt.longitude)
    lat2 = func.radians(Property.latitude)
    lon2 = func.radians(Property.longitude)
    cos_angle = (
        literal(math.sin(lat1)) * func.sin(lat2)
        + literal(math.cos(lat1)) * func.cos(lat2) * func.cos(lon2 - literal(lon1))
    )
    # Rounding can push the argument a hair past +/-1, which a native acos rejects.
    clamped = case((cos_angle > 1.0, 1.0), (cos_angle < -1.0, -1.0), else_=cos_angle)
    return literal(flt.earth_radius) * func.acos(clamped)


def bounding_box(flt: DistanceFilter) -> list[ColumnElement[bool]]:
    """Coarse lat/lon window that contains every point within the radius."""
    dlat = math.degrees(flt.radius / flt.earth_radius)
    clauses = [
        Property.latitude.is_not(None),
        Property.longitude.is_not(None),
        Property.latitude.between(flt.latitude - dlat, flt.latitude + dlat),
    ]
    cos_lat = math.cos(math.radians(flt.latitude))
    # Near the poles (or for huge radii) longitude gives no useful bound.
    if cos_lat > 1e-6 and dlat / cos_lat < 180 and abs(flt.latitude) + dlat < 90:
        dlon = dlat / cos_lat
        lo, hi = flt.longitude - dlon, flt.longitude + dlon
        if lo >= -180 and hi <= 180:
            clauses.append(Property.longitude.between(lo, hi))
    return clauses


class CriteriaSearchEngine:
    def __init__(
        self,
        earth_radius: float = EARTH_RADIUS_KM,
        default_radius: float = DEFAULT_RADIUS_KM,
        push_down_distance: bool = True,
    ):
        self.earth_radius = earth_radius
        self.default_radius = default_radius
        self.push_down_distance = push_down_distance

    @classmethod
    def from_config(cls, cfg: SearchConfig) -> "CriteriaSearchEngine":
        return cls(cfg.earth_radius_km, cfg.default_radius_km, cfg.push_down_distance)

    async def search(self, db: AsyncSession, criteria: PropertySearch) -> list[Property]:
        preds, distance = build_predicates(criteria, self.default_radius, self.earth_radius)
        clauses = [compile_predicate(p) for p in preds]

        if distance is not None and self.push_down_distance:
            clauses.append(distance_expression(distance) < distance.radius)
        elif distance is not None:
            clauses.extend(bounding_box(distance))

        result = await db.execute(select(Property).where(*clauses))
        rows = list(result.scalars().all())

        if distance is not None and not self.push_down_distance:
            rows = [
                p for p in rows
                if great_circle_distance(
                    distance.latitude, distance.longitude, p.latitude, p.longitude, distance.earth_radius,
                ) < distance.radius
            ]
        return rows
