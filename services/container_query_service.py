import math
from typing import Optional

from sqlalchemy import Integer, cast, func
from sqlalchemy.orm import Session

from models.container import Container
from schemas.container import ContainerQuery
from services.config_service import get_default_page_limit, get_max_page_limit


class ContainerQueryService:
    @staticmethod
    def list_containers(db: Session, query: Optional[ContainerQuery] = None) -> dict:
        """
        Filter then paginate the container collection.

        Criteria are combined with AND; absent criteria are not applied.
        ``total`` and ``total_pages`` describe the filtered set.
        """
        query = query or ContainerQuery()
        limit = min(query.limit or get_default_page_limit(), get_max_page_limit())
        page = query.page

        containers = db.query(Container)

        if query.status is not None:
            containers = containers.filter(Container.status == query.status)
        if query.shipping_line_id:
            containers = containers.filter(Container.shipping_line_id == query.shipping_line_id.strip())
        if query.type is not None:
            containers = containers.filter(Container.type == query.type)
        if query.container_number:
            term = query.container_number.strip().lower()
            containers = containers.filter(
                func.lower(Container.container_number).contains(term, autoescape=True)
            )

        total = containers.count()
        items = (
            containers.order_by(Container.entry_date.desc(), cast(Container.id, Integer).desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "items": items,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }


__all__ = ["ContainerQueryService"]
