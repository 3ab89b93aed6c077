"""
Room catalog service - room categories and physical rooms
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from booking_core.booking.status import RoomStatus
from frontdesk.models.ontology import RoomCategory, Room
from frontdesk.models.schemas import RoomCategoryCreate, RoomCategoryUpdate, RoomCreate, RoomUpdate

logger = logging.getLogger(__name__)


class RoomService:
    """Room catalog service"""

    def __init__(self, db: Session):
        self.db = db

    # ============== Room categories ==============

    def get_categories(self, include_inactive: bool = False) -> List[RoomCategory]:
        query = self.db.query(RoomCategory)
        if not include_inactive:
            query = query.filter(RoomCategory.is_active == True)
        return query.order_by(RoomCategory.id).all()

    def get_category(self, category_id: int) -> Optional[RoomCategory]:
        return self.db.query(RoomCategory).filter(RoomCategory.id == category_id).first()

    def get_category_by_name(self, name: str) -> Optional[RoomCategory]:
        return self.db.query(RoomCategory).filter(RoomCategory.name == name).first()

    def create_category(self, data: RoomCategoryCreate) -> RoomCategory:
        """Create a room category"""
        if self.get_category_by_name(data.name):
            raise ValueError(f"Room category '{data.name}' already exists")

        category = RoomCategory(**data.model_dump())
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info(f"Room category '{category.name}' created at {category.price_per_night}/night")
        return category

    def update_category(self, category_id: int, data: RoomCategoryUpdate) -> RoomCategory:
        """Update a room category; deactivating hides it from new bookings"""
        category = self.get_category(category_id)
        if not category:
            raise ValueError("Room category not found")

        update_data = data.model_dump(exclude_unset=True)
        if 'name' in update_data:
            existing = self.get_category_by_name(update_data['name'])
            if existing and existing.id != category_id:
                raise ValueError(f"Room category '{update_data['name']}' already exists")

        for key, value in update_data.items():
            setattr(category, key, value)

        self.db.commit()
        self.db.refresh(category)
        return category

    def get_category_with_count(self, category: RoomCategory) -> dict:
        """Category fields plus the number of active rooms"""
        room_count = self.db.query(Room).filter(
            Room.category_id == category.id,
            Room.is_active == True
        ).count()
        return {
            'id': category.id,
            'name': category.name,
            'description': category.description,
            'price_per_night': category.price_per_night,
            'max_occupancy': category.max_occupancy,
            'is_active': category.is_active,
            'created_at': category.created_at,
            'room_count': room_count,
        }

    # ============== Rooms ==============

    def get_rooms(self, category_id: Optional[int] = None, status: Optional[RoomStatus] = None,
                  is_active: Optional[bool] = True) -> List[Room]:
        query = self.db.query(Room)

        if category_id is not None:
            query = query.filter(Room.category_id == category_id)
        if status is not None:
            query = query.filter(Room.status == status)
        if is_active is not None:
            query = query.filter(Room.is_active == is_active)

        return query.order_by(Room.floor, Room.room_number).all()

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_room_by_number(self, room_number: str) -> Optional[Room]:
        return self.db.query(Room).filter(Room.room_number == room_number).first()

    def create_room(self, data: RoomCreate) -> Room:
        """Create a room"""
        if self.get_room_by_number(data.room_number):
            raise ValueError(f"Room number '{data.room_number}' already exists")

        if not self.get_category(data.category_id):
            raise ValueError("Room category not found")

        room = Room(**data.model_dump())
        self.db.add(room)
        self.db.commit()
        self.db.refresh(room)
        return room

    def update_room(self, room_id: int, data: RoomUpdate) -> Room:
        """Update a room, including its status"""
        room = self.get_room(room_id)
        if not room:
            raise ValueError("Room not found")

        update_data = data.model_dump(exclude_unset=True)

        if 'category_id' in update_data and not self.get_category(update_data['category_id']):
            raise ValueError("Room category not found")

        # occupied rooms are released by check-out
        new_status = update_data.get('status')
        if room.status == RoomStatus.OCCUPIED and new_status is not None and new_status != RoomStatus.OCCUPIED:
            raise ValueError("Occupied room status changes through check-out")

        old_status = room.status
        for key, value in update_data.items():
            setattr(room, key, value)

        self.db.commit()
        self.db.refresh(room)
        if new_status is not None and new_status != old_status:
            logger.info(f"Room {room.room_number}: {old_status.value} -> {room.status.value}")
        return room

    def get_room_detail(self, room: Room) -> dict:
        return {
            'id': room.id,
            'room_number': room.room_number,
            'floor': room.floor,
            'category_id': room.category_id,
            'category_name': room.category.name if room.category else None,
            'information': room.information,
            'status': room.status,
            'is_active': room.is_active,
        }
