import datetime as dt
from typing import List

from schemas.base import CamelModel


class ShippingLineStat(CamelModel):
    id: str
    name: str
    count: int


class DailyMovement(CamelModel):
    date: dt.date
    entries: int
    exits: int


class DashboardStats(CamelModel):
    total_containers: int
    containers_in_park: int
    containers_out: int
    containers_booked: int
    dry_containers: int
    reefer_containers: int
    dry_percentage: float
    reefer_percentage: float
    shipping_line_stats: List[ShippingLineStat]
    movements_by_day: List[DailyMovement]
    generated_at: dt.datetime
