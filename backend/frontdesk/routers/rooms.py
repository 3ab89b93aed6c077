"""
Room catalog routes - room categories, availability and rooms
"""
from typing import List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from booking_core.booking.status import RoomStatus
from frontdesk.database import get_db
from frontdesk.models.ontology import User
from frontdesk.models.schemas import (
    RoomCategoryCreate, RoomCategoryUpdate, RoomCategoryResponse, AvailabilityResponse,
    RoomCreate, RoomUpdate, RoomResponse
)
from frontdesk.security.auth import require_manager, require_staff
from frontdesk.services.availability_service import AvailabilityService
from frontdesk.services.room_service import RoomService

category_router = APIRouter(prefix="/room-categories", tags=["Room categories"])
room_router = APIRouter(prefix="/rooms", tags=["Rooms"])


# ============== Room categories ==============

@category_router.get("", response_model=List[RoomCategoryResponse])
def list_categories(
    include_inactive: bool = False,
    db: Session = Depends(get_db)
):
    """List room categories"""
    service = RoomService(db)
    return [RoomCategoryResponse(**service.get_category_with_count(c))
            for c in service.get_categories(include_inactive)]


@category_router.get("/available", response_model=List[RoomCategoryResponse])
def search_available_categories(
    check_in: date,
    check_out: date,
    occupancy: int = Query(1, ge=1),
    name: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Categories with a free room for the stay that fit the party"""
    categories = AvailabilityService(db).search_available_categories(check_in, check_out, occupancy, name)
    service = RoomService(db)
    return [RoomCategoryResponse(**service.get_category_with_count(c)) for c in categories]


@category_router.post("", response_model=RoomCategoryResponse)
def create_category(
    data: RoomCategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    """Create a room category"""
    service = RoomService(db)
    try:
        category = service.create_category(data)
        return RoomCategoryResponse(**service.get_category_with_count(category))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@category_router.put("/{category_id}", response_model=RoomCategoryResponse)
def update_category(
    category_id: int,
    data: RoomCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    """Update a room category"""
    service = RoomService(db)
    if not service.get_category(category_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room category not found")
    try:
        category = service.update_category(category_id, data)
        return RoomCategoryResponse(**service.get_category_with_count(category))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@category_router.get("/{category_id}/availability", response_model=AvailabilityResponse)
def check_availability(
    category_id: int,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """Whether at least one room of the category is free for the stay"""
    if not RoomService(db).get_category(category_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room category not found")
    if check_out <= check_in:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                            detail="Check-out date must be after check-in date")

    available = AvailabilityService(db).is_available(category_id, check_in, check_out, exclude_booking_id)
    return AvailabilityResponse(
        category_id=category_id,
        check_in_date=check_in,
        check_out_date=check_out,
        available=available
    )


# ============== Rooms ==============

@room_router.get("", response_model=List[RoomResponse])
def list_rooms(
    category_id: Optional[int] = None,
    status: Optional[RoomStatus] = None,
    is_active: Optional[bool] = True,
    db: Session = Depends(get_db)
):
    """List rooms"""
    service = RoomService(db)
    return [RoomResponse(**service.get_room_detail(r)) for r in service.get_rooms(category_id, status, is_active)]


@room_router.post("", response_model=RoomResponse)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    """Create a room"""
    service = RoomService(db)
    try:
        room = service.create_room(data)
        return RoomResponse(**service.get_room_detail(room))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@room_router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Update a room, e.g. take it out of service"""
    service = RoomService(db)
    if not service.get_room(room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    try:
        room = service.update_room(room_id, data)
        return RoomResponse(**service.get_room_detail(room))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
