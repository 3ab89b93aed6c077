"""
Persistent entities
Booking is the aggregate root for its cancellation, modification and payment records
"""
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    Column, Integer, String, DateTime, Date, ForeignKey, Text,
    Enum as SQLEnum, Boolean, Numeric, Table, UniqueConstraint
)
from sqlalchemy.orm import relationship

from booking_core.booking.status import BookingStatus, RoomStatus
from frontdesk.database import Base


# ============== Enums ==============

class UserRole(str, Enum):
    """User role"""
    GUEST = "guest"
    RECEPTIONIST = "receptionist"
    MANAGER = "manager"


STAFF_ROLES = (UserRole.RECEPTIONIST, UserRole.MANAGER)


class PaymentStatus(str, Enum):
    """Payment status"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    PARTIAL = "partial"          # partly refunded
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Payment method"""
    CARD = "card"
    TRANSFER = "transfer"


# ============== Entities ==============

booking_extras = Table(
    "booking_extras",
    Base.metadata,
    Column("booking_id", Integer, ForeignKey("bookings.id", ondelete="CASCADE"), primary_key=True),
    Column("extra_id", Integer, ForeignKey("extra_services.id"), primary_key=True),
)


class RoomCategory(Base):
    """
    Room category - rooms of one category share rate and capacity
    """
    __tablename__ = "room_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(Text)
    price_per_night = Column(Numeric(10, 2), nullable=False)
    max_occupancy = Column(Integer, nullable=False, default=2)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    rooms = relationship("Room", back_populates="category", order_by="Room.id")


class Room(Base):
    """
    Physical room
    """
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(10), unique=True, nullable=False)
    floor = Column(Integer)
    category_id = Column(Integer, ForeignKey("room_categories.id"), nullable=False)
    status = Column(SQLEnum(RoomStatus), default=RoomStatus.AVAILABLE, nullable=False)
    is_active = Column(Boolean, default=True)
    information = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("RoomCategory", back_populates="rooms")
    bookings = relationship("Booking", back_populates="room")


class ExtraService(Base):
    """
    Bookable extra (breakfast, parking, ...) with a flat or per-person price
    """
    __tablename__ = "extra_services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50))
    per_person = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class User(Base):
    """
    User - guests and staff
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    email = Column(String(100))
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.GUEST)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    bookings = relationship("Booking", back_populates="guest", foreign_keys="Booking.guest_id")

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class Booking(Base):
    """
    Booking - aggregate root
    check_out_date > check_in_date always holds for persisted rows
    """
    __tablename__ = "bookings"
    __table_args__ = (UniqueConstraint("booking_number", name="uq_booking_number"),)

    id = Column(Integer, primary_key=True, index=True)
    booking_number = Column(String(64), nullable=False, index=True)
    guest_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("room_categories.id"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    check_in_date = Column(Date, nullable=False, index=True)
    check_out_date = Column(Date, nullable=False, index=True)
    guests = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(12, 2))
    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_by = Column(Integer, ForeignKey("users.id"))

    guest = relationship("User", back_populates="bookings", foreign_keys=[guest_id])
    creator = relationship("User", foreign_keys=[created_by])
    category = relationship("RoomCategory")
    room = relationship("Room", back_populates="bookings")
    extras = relationship("ExtraService", secondary=booking_extras, order_by="ExtraService.name")
    cancellation = relationship("BookingCancellation", back_populates="booking", uselist=False)
    modifications = relationship(
        "BookingModification", back_populates="booking",
        order_by="BookingModification.id"
    )
    payments = relationship("Payment", back_populates="booking", order_by="Payment.id")

    @property
    def nights(self) -> int:
        return (self.check_out_date - self.check_in_date).days

    @property
    def extra_ids(self) -> frozenset:
        return frozenset(e.id for e in self.extras)


class BookingCancellation(Base):
    """
    Cancellation record - written once when a booking is cancelled
    handled_by is NULL for guest self-service
    """
    __tablename__ = "booking_cancellations"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, unique=True)
    cancelled_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    reason = Column(Text)
    cancellation_fee = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    refunded_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    handled_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    booking = relationship("Booking", back_populates="cancellation")
    handler = relationship("User")


class BookingModification(Base):
    """
    Modification record - one changed field of one edit, append-only
    """
    __tablename__ = "booking_modifications"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    modified_at = Column(DateTime, nullable=False)
    field_changed = Column(String(50), nullable=False)
    old_value = Column(Text)
    new_value = Column(Text)
    reason = Column(Text)
    handled_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    booking = relationship("Booking", back_populates="modifications")
    handler = relationship("User")


class Payment(Base):
    """
    Payment collected for a booking
    refunded_amount is filled in when the booking is cancelled
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod), nullable=False, default=PaymentMethod.CARD)
    status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    transaction_ref = Column(String(100))
    paid_at = Column(DateTime)
    refunded_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    created_at = Column(DateTime, default=datetime.utcnow)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    booking = relationship("Booking", back_populates="payments")
