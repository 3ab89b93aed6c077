"""
Booking service tests - lifecycle against an in-memory database
"""
import re
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from booking_core.booking.status import BookingStatus, RoomStatus
from booking_core.errors import (
    BookingNotFoundError, BookingValidationError, InvalidTransitionError,
    PreconditionViolation, RoomUnavailableError
)
from frontdesk.models.ontology import Booking, BookingCancellation, BookingModification
from frontdesk.models.schemas import BookingCreate, BookingUpdate
from frontdesk.services.booking_service import BookingService


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


NOW = datetime(2025, 10, 1, 9, 0)


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def service(db_session, clock):
    return BookingService(db_session, clock=clock)


def request(category, guest, check_in=date(2025, 11, 5), check_out=date(2025, 11, 8), guests=2, extras=()):
    return BookingCreate(
        category_id=category.id,
        check_in_date=check_in,
        check_out_date=check_out,
        guests=guests,
        extra_ids=[e.id for e in extras],
        guest_id=guest.id,
    )


class TestCreateBooking:
    def test_create_prices_and_assigns_room(self, service, sample_category, sample_room, guest_user, parking):
        booking = service.create_booking(request(sample_category, guest_user, extras=[parking]))

        assert booking.status == BookingStatus.PENDING
        assert booking.room_id == sample_room.id
        assert booking.total_price == Decimal("320.00")
        assert booking.nights == 3
        assert [e.name for e in booking.extras] == ["Parking"]
        assert re.match(r"^20251001-[0-9A-F]{8}$", booking.booking_number)

    def test_per_person_extra_uses_guest_count(self, service, sample_category, sample_room, guest_user, breakfast):
        booking = service.create_booking(request(sample_category, guest_user, guests=2, extras=[breakfast]))
        assert booking.total_price == Decimal("330.00")

    def test_only_room_taken(self, service, db_session, sample_category, sample_room, guest_user):
        service.create_booking(request(sample_category, guest_user))

        with pytest.raises(RoomUnavailableError):
            service.create_booking(request(sample_category, guest_user,
                                           check_in=date(2025, 11, 6), check_out=date(2025, 11, 7)))
        assert db_session.query(Booking).count() == 1

    def test_same_day_turnover_is_blocked(self, service, sample_category, sample_room, guest_user):
        service.create_booking(request(sample_category, guest_user))
        with pytest.raises(RoomUnavailableError):
            service.create_booking(request(sample_category, guest_user,
                                           check_in=date(2025, 11, 8), check_out=date(2025, 11, 10)))

    def test_second_room_is_assigned(self, service, sample_category, sample_room, sample_room_102, guest_user):
        first = service.create_booking(request(sample_category, guest_user))
        second = service.create_booking(request(sample_category, guest_user))
        assert {first.room_id, second.room_id} == {sample_room.id, sample_room_102.id}

    def test_cancelled_booking_frees_the_room(self, service, sample_category, sample_room, guest_user):
        first = service.create_booking(request(sample_category, guest_user))
        service.cancel_booking(first.id)
        second = service.create_booking(request(sample_category, guest_user))
        assert second.room_id == sample_room.id

    def test_room_out_of_service_is_skipped(self, service, db_session, sample_category, sample_room, guest_user):
        sample_room.status = RoomStatus.MAINTENANCE
        db_session.commit()
        with pytest.raises(RoomUnavailableError):
            service.create_booking(request(sample_category, guest_user))

    def test_validation_errors_are_collected(self, service, sample_category, sample_room, guest_user):
        with pytest.raises(BookingValidationError) as exc_info:
            service.create_booking(request(sample_category, guest_user,
                                           check_in=date(2025, 9, 1), check_out=date(2025, 9, 3), guests=9))
        assert "Check-in date cannot be in the past" in exc_info.value.errors
        assert "Guest count 9 exceeds the category maximum of 4" in exc_info.value.errors
        assert not isinstance(exc_info.value, RoomUnavailableError)

    def test_unknown_extra_rejected(self, service, sample_category, sample_room, guest_user):
        data = request(sample_category, guest_user)
        data.extra_ids = [999]
        with pytest.raises(BookingValidationError) as exc_info:
            service.create_booking(data)
        assert exc_info.value.errors == ["Unknown extra service(s): 999"]

    def test_inactive_category_not_bookable(self, service, db_session, sample_category, sample_room, guest_user):
        sample_category.is_active = False
        db_session.commit()
        with pytest.raises(BookingValidationError):
            service.create_booking(request(sample_category, guest_user))

    def test_guest_actor_books_for_self(self, service, sample_category, sample_room, guest_user, other_guest):
        booking = service.create_booking(request(sample_category, other_guest), actor=guest_user)
        assert booking.guest_id == guest_user.id
        assert booking.created_by == guest_user.id

    def test_staff_must_name_guest(self, service, sample_category, sample_room, receptionist):
        data = BookingCreate(category_id=sample_category.id, check_in_date=date(2025, 11, 5),
                             check_out_date=date(2025, 11, 8), guests=2)
        with pytest.raises(BookingValidationError) as exc_info:
            service.create_booking(data, actor=receptionist)
        assert "Guest is required" in exc_info.value.errors

    def test_anonymous_booking_has_no_creator(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        assert booking.created_by is None
        assert booking.guest_id == guest_user.id


class TestUpdateBooking:
    def test_guest_count_change_records_one_field(self, service, db_session, sample_category,
                                                 sample_room, guest_user, receptionist, parking):
        booking = service.create_booking(request(sample_category, guest_user, guests=2, extras=[parking]))

        booking, records = service.update_booking(booking.id, BookingUpdate(guests=4), actor=receptionist)

        assert len(records) == 1
        assert records[0].field_changed == "guests"
        assert (records[0].old_value, records[0].new_value) == ("2", "4")
        assert records[0].handled_by == receptionist.id
        assert booking.status == BookingStatus.MODIFIED
        assert db_session.query(BookingModification).count() == 1

    def test_no_op_save_writes_nothing(self, service, db_session, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))

        booking, records = service.update_booking(
            booking.id, BookingUpdate(guests=2, check_in_date=date(2025, 11, 5))
        )

        assert records == []
        assert booking.status == BookingStatus.PENDING
        assert db_session.query(BookingModification).count() == 0

    def test_date_change_keeps_room_and_reprices(self, service, sample_category, sample_room,
                                                sample_room_102, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        booking, records = service.update_booking(
            booking.id, BookingUpdate(check_out_date=date(2025, 11, 10), reason="Longer stay")
        )

        assert booking.room_id == sample_room.id
        assert booking.total_price == Decimal("500.00")
        assert [(r.field_changed, r.old_value, r.new_value) for r in records] == [
            ("check_out_date", "08.11.2025", "10.11.2025"),
            ("total_price", "300.00", "500.00"),
        ]
        assert {r.reason for r in records} == {"Longer stay"}
        assert {r.modified_at for r in records} == {NOW}

    def test_extending_over_own_dates_is_allowed(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        booking, _ = service.update_booking(booking.id, BookingUpdate(check_in_date=date(2025, 11, 4)))
        assert booking.room_id == sample_room.id

    def test_room_reassigned_when_current_room_taken(self, service, sample_category, sample_room,
                                                    sample_room_102, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        later = service.create_booking(request(sample_category, guest_user,
                                               check_in=date(2025, 11, 10), check_out=date(2025, 11, 12)))
        assert booking.room_id == later.room_id == sample_room.id

        booking, _ = service.update_booking(
            booking.id, BookingUpdate(check_in_date=date(2025, 11, 9), check_out_date=date(2025, 11, 11))
        )
        assert booking.room_id == sample_room_102.id

    def test_unavailable_edit_changes_nothing(self, service, db_session, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.create_booking(request(sample_category, guest_user,
                                       check_in=date(2025, 11, 10), check_out=date(2025, 11, 12)))

        with pytest.raises(RoomUnavailableError):
            service.update_booking(booking.id, BookingUpdate(check_out_date=date(2025, 11, 11)))

        db_session.refresh(booking)
        assert booking.check_out_date == date(2025, 11, 8)
        assert booking.status == BookingStatus.PENDING
        assert db_session.query(BookingModification).count() == 0

    def test_adding_extra_records_extras_and_price(self, service, sample_category, sample_room, guest_user, spa):
        booking = service.create_booking(request(sample_category, guest_user))
        booking, records = service.update_booking(booking.id, BookingUpdate(extra_ids=[spa.id]))

        changes = {r.field_changed: (r.old_value, r.new_value) for r in records}
        assert changes == {
            "total_price": ("300.00", "335.50"),
            "extras": ("none", "Spa access"),
        }

    def test_category_change_moves_room(self, service, sample_category, sample_room,
                                        suite_category, suite_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        booking, records = service.update_booking(booking.id, BookingUpdate(category_id=suite_category.id))

        assert booking.room_id == suite_room.id
        assert booking.total_price == Decimal("750.00")
        assert [r.field_changed for r in records] == ["total_price"]

    def test_guest_count_above_new_category_maximum(self, service, sample_category, sample_room,
                                                    suite_category, suite_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user, guests=3))
        with pytest.raises(BookingValidationError):
            service.update_booking(booking.id, BookingUpdate(category_id=suite_category.id))

    def test_cancelled_booking_cannot_be_edited(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.cancel_booking(booking.id)
        with pytest.raises(InvalidTransitionError):
            service.update_booking(booking.id, BookingUpdate(guests=1))

    def test_unknown_booking(self, service):
        with pytest.raises(BookingNotFoundError):
            service.update_booking(404, BookingUpdate(guests=1))


class TestCancelBooking:
    def test_ten_days_before(self, service, db_session, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user,
                                                 check_in=date(2025, 10, 11), check_out=date(2025, 10, 14)))
        assert booking.total_price == Decimal("300.00")

        cancellation = service.cancel_booking(booking.id, reason="Change of plans")

        assert cancellation.cancellation_fee == Decimal("60.00")
        assert cancellation.refunded_amount == Decimal("240.00")
        assert cancellation.reason == "Change of plans"
        assert cancellation.handled_by is None
        db_session.refresh(booking)
        assert booking.status == BookingStatus.CANCELLED

    def test_two_days_before(self, service, sample_category, sample_room, guest_user, receptionist):
        booking = service.create_booking(request(sample_category, guest_user,
                                                 check_in=date(2025, 10, 3), check_out=date(2025, 10, 6)))
        cancellation = service.cancel_booking(booking.id, actor=receptionist)

        assert cancellation.cancellation_fee == Decimal("150.00")
        assert cancellation.refunded_amount == Decimal("150.00")
        assert cancellation.handled_by == receptionist.id
        assert cancellation.reason == "Cancelled by guest"

    def test_cannot_cancel_twice(self, service, db_session, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.cancel_booking(booking.id)
        with pytest.raises(InvalidTransitionError):
            service.cancel_booking(booking.id)
        assert db_session.query(BookingCancellation).count() == 1

    def test_missing_total_price_rolls_back(self, service, db_session, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        booking.total_price = None
        db_session.commit()

        with pytest.raises(PreconditionViolation):
            service.cancel_booking(booking.id)

        db_session.refresh(booking)
        assert booking.status == BookingStatus.PENDING
        assert db_session.query(BookingCancellation).count() == 0

    def test_quote_does_not_persist(self, service, db_session, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        quote = service.quote_cancellation(booking.id)

        assert quote.is_free
        assert quote.days_before == 34
        assert quote.timeframe == "30 or more days before check-in"
        assert service.get_cancellation(booking.id) is None
        assert booking.status == BookingStatus.PENDING


class TestStatusTransitions:
    def test_full_stay(self, service, clock, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))

        assert service.confirm_booking(booking.id).status == BookingStatus.CONFIRMED
        clock.now = datetime(2025, 11, 5, 14, 0)
        booking = service.check_in(booking.id)
        assert booking.status == BookingStatus.CHECKED_IN
        assert booking.room.status == RoomStatus.OCCUPIED
        booking = service.check_out(booking.id)
        assert booking.status == BookingStatus.COMPLETED
        assert booking.room.status == RoomStatus.CLEANING

    def test_check_in_before_arrival_day_rejected(self, service, db_session, sample_category,
                                                  sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.confirm_booking(booking.id)

        with pytest.raises(BookingValidationError) as exc_info:
            service.check_in(booking.id)

        assert exc_info.value.errors == ["Check-in is not possible before 05.11.2025"]
        db_session.refresh(booking)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.room.status == RoomStatus.AVAILABLE

    def test_check_in_after_stay_rejected(self, service, clock, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.confirm_booking(booking.id)
        clock.now = datetime(2025, 11, 8, 10, 0)

        with pytest.raises(BookingValidationError):
            service.check_in(booking.id)

    def test_late_arrival_can_check_in(self, service, clock, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.confirm_booking(booking.id)
        clock.now = datetime(2025, 11, 6, 23, 0)
        assert service.check_in(booking.id).status == BookingStatus.CHECKED_IN

    def test_check_in_of_cancelled_booking_is_invalid_transition(self, service, sample_category,
                                                                  sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.cancel_booking(booking.id)
        with pytest.raises(InvalidTransitionError):
            service.check_in(booking.id)

    def test_cancelling_stay_in_progress_frees_room_for_cleaning(self, service, clock, sample_category,
                                                                 sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.confirm_booking(booking.id)
        clock.now = datetime(2025, 11, 5, 15, 0)
        service.check_in(booking.id)

        cancellation = service.cancel_booking(booking.id)

        assert cancellation.cancellation_fee == Decimal("300.00")
        assert cancellation.refunded_amount == Decimal("0.00")
        booking = service.get_booking(booking.id)
        assert booking.status == BookingStatus.CANCELLED
        assert booking.room.status == RoomStatus.CLEANING

    def test_cancelling_before_arrival_leaves_room_alone(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.cancel_booking(booking.id)
        assert service.get_booking(booking.id).room.status == RoomStatus.AVAILABLE

    def test_check_out_requires_check_in(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        with pytest.raises(InvalidTransitionError):
            service.check_out(booking.id)

    def test_modified_booking_can_be_confirmed(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        service.update_booking(booking.id, BookingUpdate(guests=1))
        assert service.confirm_booking(booking.id).status == BookingStatus.CONFIRMED


class TestGuestSelfService:
    def test_guest_cancellation_has_no_handler(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user), actor=guest_user)
        cancellation = service.cancel_booking(booking.id, actor=guest_user)
        assert cancellation.handled_by is None

    def test_guest_edit_has_no_handler(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user), actor=guest_user)
        booking, records = service.update_booking(booking.id, BookingUpdate(guests=1), actor=guest_user)
        assert [r.handled_by for r in records] == [None]


class TestQueries:
    def test_modification_history_grouped_newest_first(self, service, clock, sample_category,
                                                       sample_room, guest_user, receptionist):
        booking = service.create_booking(request(sample_category, guest_user))
        service.update_booking(booking.id, BookingUpdate(guests=3), actor=receptionist)
        clock.now = NOW + timedelta(hours=2)
        service.update_booking(booking.id, BookingUpdate(check_out_date=date(2025, 11, 9)), reason="Extra night")

        history = service.get_modification_history(booking.id)

        assert len(history) == 2
        assert history[0]['modified_at'] == NOW + timedelta(hours=2)
        assert history[0]['handled_by'] is None
        assert history[0]['reason'] == "Extra night"
        assert [c.field_changed for c in history[0]['changes']] == ["check_out_date", "total_price"]
        assert history[1]['handled_by'] == receptionist.id
        assert [c.field_changed for c in history[1]['changes']] == ["guests"]

    def test_filters(self, service, sample_category, sample_room, sample_room_102, guest_user, other_guest):
        mine = service.create_booking(request(sample_category, guest_user))
        service.create_booking(request(sample_category, other_guest,
                                       check_in=date(2025, 12, 1), check_out=date(2025, 12, 3)))

        assert [b.id for b in service.get_bookings(guest_id=guest_user.id)] == [mine.id]
        assert len(service.get_bookings(check_in_from=date(2025, 11, 20))) == 1
        assert len(service.get_bookings(status=BookingStatus.PENDING)) == 2
        assert service.get_booking_by_number(mine.booking_number).id == mine.id

    def test_detail(self, service, sample_category, sample_room, guest_user):
        booking = service.create_booking(request(sample_category, guest_user))
        detail = service.get_booking_detail(booking)
        assert detail['guest_name'] == "Gina Guest"
        assert detail['category_name'] == "Standard"
        assert detail['room_number'] == "101"
        assert detail['nights'] == 3
