"""Read-side aggregation for the yard dashboard.

Nothing here writes to the session; for a fixed ``now`` and an unchanged
store every call returns the same figures.
"""
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.clock import utcnow
from models.container import Container, ContainerStatus, ContainerType
from services.config_service import get_yard_timezone
from services.reference_service import shipping_line_service

MOVEMENT_WINDOW_DAYS = 30


def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar day of a stored (naive UTC) timestamp in the yard's zone."""
    return value.replace(tzinfo=timezone.utc).astimezone(tz).date()


def _percentage(part: int, total: int) -> float:
    if not total:
        return 0.0
    return round(part * 100.0 / total, 1)


class DashboardService:
    @staticmethod
    def compute_stats(db: Session, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> dict:
        now = now or utcnow()
        tz = tz or get_yard_timezone()

        status_counts: Dict[ContainerStatus, int] = dict(
            db.query(Container.status, func.count(Container.id)).group_by(Container.status).all()
        )
        type_counts: Dict[ContainerType, int] = dict(
            db.query(Container.type, func.count(Container.id)).group_by(Container.type).all()
        )
        total = sum(status_counts.values())
        dry = type_counts.get(ContainerType.DRY, 0)
        reefer = type_counts.get(ContainerType.REEFER, 0)

        return {
            "total_containers": total,
            "containers_in_park": status_counts.get(ContainerStatus.IN_PARK, 0),
            "containers_out": status_counts.get(ContainerStatus.OUT, 0),
            "containers_booked": status_counts.get(ContainerStatus.BOOKED, 0),
            "dry_containers": dry,
            "reefer_containers": reefer,
            "dry_percentage": _percentage(dry, total),
            "reefer_percentage": _percentage(reefer, total),
            "shipping_line_stats": DashboardService.shipping_line_stats(db),
            "movements_by_day": DashboardService.movements_by_day(db, now, tz),
            "generated_at": now,
        }

    @staticmethod
    def shipping_line_stats(db: Session) -> List[dict]:
        """In-park container count for every shipping line, active or not."""
        in_park_by_line = dict(
            db.query(Container.shipping_line_id, func.count(Container.id))
            .filter(
                Container.status == ContainerStatus.IN_PARK,
                Container.shipping_line_id.isnot(None),
            )
            .group_by(Container.shipping_line_id)
            .all()
        )
        return [
            {"id": line.id, "name": line.name, "count": in_park_by_line.get(line.id, 0)}
            for line in shipping_line_service.list(db)
        ]

    @staticmethod
    def movements_by_day(db: Session, now: datetime, tz: tzinfo) -> List[dict]:
        """Entries and exits per calendar day, oldest first, ending today."""
        today = local_date(now, tz)
        days = [today - timedelta(days=offset) for offset in range(MOVEMENT_WINDOW_DAYS - 1, -1, -1)]
        buckets = {day: {"date": day, "entries": 0, "exits": 0} for day in days}

        # One spare day on each side covers any zone offset
        window_start = now - timedelta(days=MOVEMENT_WINDOW_DAYS + 1)
        window_end = now + timedelta(days=1)

        entry_rows = db.query(Container.entry_date).filter(
            Container.entry_date >= window_start, Container.entry_date <= window_end
        )
        for (entry_date,) in entry_rows:
            bucket = buckets.get(local_date(entry_date, tz))
            if bucket is not None:
                bucket["entries"] += 1

        exit_rows = db.query(Container.exit_date).filter(
            Container.exit_date.isnot(None),
            Container.exit_date >= window_start,
            Container.exit_date <= window_end,
        )
        for (exit_date,) in exit_rows:
            bucket = buckets.get(local_date(exit_date, tz))
            if bucket is not None:
                bucket["exits"] += 1

        return [buckets[day] for day in days]


__all__ = ["DashboardService", "MOVEMENT_WINDOW_DAYS", "local_date"]
