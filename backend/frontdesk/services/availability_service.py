"""
Availability service - loads candidate rooms and their bookings,
then asks the overlap checker
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from booking_core.booking import availability
from booking_core.booking.status import BookingStatus, UNBOOKABLE_ROOM_STATUSES
from frontdesk.models.ontology import Booking, Room, RoomCategory

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Availability queries against the database"""

    def __init__(self, db: Session):
        self.db = db

    def get_bookable_rooms(self, category_id: int, lock: bool = False) -> List[Room]:
        """Rooms of a category that may be assigned, in assignment order.

        With lock=True the rows are selected FOR UPDATE so that the check and
        the following insert happen under the same lock.
        """
        query = self.db.query(Room).filter(
            Room.category_id == category_id,
            Room.is_active == True,
            Room.status.notin_(list(UNBOOKABLE_ROOM_STATUSES))
        ).order_by(Room.id)
        if lock:
            query = query.with_for_update()
        return query.all()

    def _bookings_for(self, room_ids: List[int], check_in: date, check_out: date) -> List[Booking]:
        if not room_ids:
            return []
        # coarse prefilter; the overlap checker makes the final call
        return self.db.query(Booking).filter(
            Booking.room_id.in_(room_ids),
            Booking.status != BookingStatus.CANCELLED,
            Booking.check_in_date <= check_out,
            Booking.check_out_date >= check_in
        ).all()

    def is_room_free(self, room_id: int, check_in: date, check_out: date,
                     exclude_booking_id: Optional[int] = None) -> bool:
        bookings = self._bookings_for([room_id], check_in, check_out)
        return availability.is_room_free(room_id, bookings, check_in, check_out, exclude_booking_id)

    def find_free_room(self, category_id: int, check_in: date, check_out: date,
                       exclude_booking_id: Optional[int] = None,
                       prefer_room_id: Optional[int] = None,
                       lock: bool = False) -> Optional[Room]:
        """First free room of the category, trying prefer_room_id first"""
        rooms = self.get_bookable_rooms(category_id, lock=lock)
        bookings = self._bookings_for([r.id for r in rooms], check_in, check_out)
        return availability.find_free_room(
            rooms, bookings, check_in, check_out,
            exclude_booking_id=exclude_booking_id,
            prefer_room_id=prefer_room_id
        )

    def is_available(self, category_id: int, check_in: date, check_out: date,
                     exclude_booking_id: Optional[int] = None) -> bool:
        """At least one room of the category is free for the whole range"""
        rooms = self.get_bookable_rooms(category_id)
        bookings = self._bookings_for([r.id for r in rooms], check_in, check_out)
        result = availability.is_available(rooms, bookings, check_in, check_out, exclude_booking_id)
        logger.debug(f"Category {category_id} available {check_in} -> {check_out}: {result}")
        return result

    def search_available_categories(self, check_in: Optional[date], check_out: Optional[date],
                                    occupancy: int = 1,
                                    category_name: Optional[str] = None) -> List[RoomCategory]:
        """Active categories that fit `occupancy` guests and have a free room.

        An incomplete or inverted date range yields an empty list.
        """
        if check_in is None or check_out is None or check_out <= check_in:
            return []

        query = self.db.query(RoomCategory).filter(
            RoomCategory.is_active == True,
            RoomCategory.max_occupancy >= occupancy
        )
        if category_name:
            query = query.filter(RoomCategory.name.ilike(f"%{category_name}%"))

        return [
            category for category in query.order_by(RoomCategory.price_per_night, RoomCategory.id).all()
            if self.is_available(category.id, check_in, check_out)
        ]
