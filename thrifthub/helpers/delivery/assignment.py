import logging
from typing import List, Optional
from sqlmodel import Session, or_, select

from thrifthub.models.campus.zone_adjacency import ZoneAdjacency
from thrifthub.models.delivery.rider import Rider


def adjacent_zone_ids(session: Session, zone_id: int) -> List[int]:
    pairs = session.exec(
        select(ZoneAdjacency).where(or_(ZoneAdjacency.zone_id == zone_id, ZoneAdjacency.adjacent_zone_id == zone_id))
    ).all()
    ids = {pair.adjacent_zone_id if pair.zone_id == zone_id else pair.zone_id for pair in pairs}
    ids.discard(zone_id)
    return sorted(ids)


def _least_busy(session: Session, zone_ids: List[int]) -> Optional[Rider]:
    if not zone_ids:
        return None
    return session.exec(
        select(Rider)
        .where(Rider.zone_id.in_(zone_ids), Rider.is_available == True)  # noqa: E712
        .order_by(Rider.total_deliveries.asc(), Rider.id.asc())
    ).first()


def find_available_rider(session: Session, zone_id: int) -> Optional[Rider]:
    """Least busy available rider in the zone, else in an adjacent zone."""
    rider = _least_busy(session, [zone_id])
    if rider:
        return rider

    neighbours = adjacent_zone_ids(session, zone_id)
    rider = _least_busy(session, neighbours)
    if rider:
        logging.info(f"DELIVERY >>> No rider free in zone {zone_id}, borrowing rider {rider.id} from zone {rider.zone_id}")
    return rider
