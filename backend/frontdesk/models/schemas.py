"""
Pydantic schemas
Request/response validation for the API
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from booking_core.booking.status import BookingStatus, RoomStatus
from frontdesk.models.ontology import UserRole, PaymentStatus, PaymentMethod


# ============== Room category Schemas ==============

class RoomCategoryBase(BaseModel):
    name: str = Field(..., max_length=50)
    description: Optional[str] = None
    price_per_night: Decimal = Field(..., ge=0)
    max_occupancy: int = Field(default=2, ge=1)
    is_active: bool = True


class RoomCategoryCreate(RoomCategoryBase):
    pass


class RoomCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    price_per_night: Optional[Decimal] = Field(None, ge=0)
    max_occupancy: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class RoomCategoryResponse(RoomCategoryBase):
    id: int
    created_at: datetime
    room_count: int = 0
    model_config = ConfigDict(from_attributes=True)


class AvailabilityResponse(BaseModel):
    category_id: int
    check_in_date: date
    check_out_date: date
    available: bool


# ============== Room Schemas ==============

class RoomBase(BaseModel):
    room_number: str = Field(..., max_length=10)
    floor: Optional[int] = None
    category_id: int
    information: Optional[str] = None


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    category_id: Optional[int] = None
    status: Optional[RoomStatus] = None
    is_active: Optional[bool] = None
    information: Optional[str] = None


class RoomResponse(RoomBase):
    id: int
    status: RoomStatus
    is_active: bool
    category_name: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


# ============== Extra service Schemas ==============

class ExtraServiceBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    category: Optional[str] = Field(None, max_length=50)
    per_person: bool = False


class ExtraServiceCreate(ExtraServiceBase):
    pass


class ExtraServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, max_length=50)
    per_person: Optional[bool] = None
    is_active: Optional[bool] = None


class ExtraServiceResponse(ExtraServiceBase):
    id: int
    is_active: bool
    model_config = ConfigDict(from_attributes=True)


# ============== User Schemas ==============

class UserCreate(BaseModel):
    username: str = Field(..., max_length=50)
    password: str = Field(..., min_length=6)
    name: str = Field(..., max_length=100)
    email: Optional[str] = None
    role: UserRole = UserRole.GUEST


class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    email: Optional[str]
    role: UserRole
    is_active: bool
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============== Booking Schemas ==============

class BookingCreate(BaseModel):
    # guest count is validated by the booking engine, not here
    category_id: int
    check_in_date: date
    check_out_date: date
    guests: int = 1
    extra_ids: List[int] = Field(default_factory=list)
    guest_id: Optional[int] = None


class BookingUpdate(BaseModel):
    category_id: Optional[int] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    guests: Optional[int] = None
    extra_ids: Optional[List[int]] = None
    reason: Optional[str] = None


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    booking_number: str
    guest_id: int
    guest_name: Optional[str] = None
    category_id: int
    category_name: Optional[str] = None
    room_id: int
    room_number: Optional[str] = None
    check_in_date: date
    check_out_date: date
    nights: int
    guests: int
    total_price: Optional[Decimal]
    status: BookingStatus
    extras: List[ExtraServiceResponse] = Field(default_factory=list)
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ModificationResponse(BaseModel):
    id: int
    booking_id: int
    modified_at: datetime
    field_changed: str
    old_value: Optional[str]
    new_value: Optional[str]
    reason: Optional[str]
    handled_by: Optional[int]
    model_config = ConfigDict(from_attributes=True)


class ModificationGroup(BaseModel):
    """All field changes of one edit"""
    modified_at: datetime
    handled_by: Optional[int]
    reason: Optional[str]
    changes: List[ModificationResponse]


class BookingUpdateResponse(BaseModel):
    booking: BookingResponse
    modifications: List[ModificationResponse]


class CancellationQuoteResponse(BaseModel):
    booking_id: int
    total_price: Decimal
    days_before: int
    fee_rate: Decimal
    fee: Decimal
    refund: Decimal
    is_free: bool
    timeframe: str


class CancellationResponse(BaseModel):
    id: int
    booking_id: int
    cancelled_at: datetime
    reason: Optional[str]
    cancellation_fee: Decimal
    refunded_amount: Decimal
    handled_by: Optional[int]
    model_config = ConfigDict(from_attributes=True)


# ============== Payment Schemas ==============

class PaymentCreate(BaseModel):
    # amount defaults to the booking's total price
    amount: Optional[Decimal] = Field(None, gt=0)
    method: PaymentMethod = PaymentMethod.CARD
    status: PaymentStatus = PaymentStatus.PAID
    transaction_ref: Optional[str] = Field(None, max_length=100)


class PaymentResponse(BaseModel):
    id: int
    booking_id: int
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    transaction_ref: Optional[str]
    paid_at: Optional[datetime]
    refunded_amount: Decimal
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
