"""
Seed data script
Creates: room categories, rooms, extra services and default accounts

Default accounts (password 123456):
  manager     Maria Manager    manager
  front1      Felix Front      receptionist
  guest1      Gina Guest       guest

Run from backend/:  python -m frontdesk.init_data
"""
from decimal import Decimal

from booking_core.booking.status import RoomStatus
from frontdesk.database import SessionLocal, init_db
from frontdesk.models.ontology import RoomCategory, Room, ExtraService, User, UserRole
from frontdesk.security.auth import get_password_hash


def init_room_categories(db):
    """Room categories; existing names are left untouched"""
    category_defs = [
        {
            'name': 'Single',
            'description': 'Compact single room with desk and rain shower',
            'price_per_night': Decimal('79.00'),
            'max_occupancy': 1,
        },
        {
            'name': 'Double',
            'description': 'Double room with queen-size bed',
            'price_per_night': Decimal('119.00'),
            'max_occupancy': 2,
        },
        {
            'name': 'Family',
            'description': 'Two connected rooms with sofa bed',
            'price_per_night': Decimal('189.00'),
            'max_occupancy': 4,
        },
        {
            'name': 'Suite',
            'description': 'Suite with separate living area and balcony',
            'price_per_night': Decimal('259.00'),
            'max_occupancy': 2,
        },
    ]

    created = []
    for data in category_defs:
        if not db.query(RoomCategory).filter(RoomCategory.name == data['name']).first():
            db.add(RoomCategory(**data))
            created.append(data['name'])

    db.commit()
    print(f"Room categories: {len(created)} created")
    return {c.name: c for c in db.query(RoomCategory).all()}


def init_rooms(db, categories):
    """Rooms on floors 1-3: singles and doubles low, family rooms and suites high"""
    room_defs = (
        [(f"1{n:02d}", 1, 'Single') for n in range(1, 5)]
        + [(f"1{n:02d}", 1, 'Double') for n in range(5, 11)]
        + [(f"2{n:02d}", 2, 'Double') for n in range(1, 7)]
        + [(f"2{n:02d}", 2, 'Family') for n in range(7, 11)]
        + [(f"3{n:02d}", 3, 'Suite') for n in range(1, 4)]
    )

    created = 0
    for room_number, floor, category_name in room_defs:
        if not db.query(Room).filter(Room.room_number == room_number).first():
            db.add(Room(
                room_number=room_number,
                floor=floor,
                category_id=categories[category_name].id,
                status=RoomStatus.AVAILABLE
            ))
            created += 1

    db.commit()
    print(f"Rooms: {created} created")


def init_extras(db):
    """Extra services"""
    extra_defs = [
        {'name': 'Breakfast', 'price': Decimal('15.00'), 'category': 'food', 'per_person': True},
        {'name': 'Half board', 'price': Decimal('32.00'), 'category': 'food', 'per_person': True},
        {'name': 'Parking', 'price': Decimal('12.00'), 'category': 'transport'},
        {'name': 'Airport shuttle', 'price': Decimal('45.00'), 'category': 'transport'},
        {'name': 'Late checkout', 'price': Decimal('25.00'), 'category': 'service'},
        {'name': 'Spa access', 'price': Decimal('29.00'), 'category': 'wellness', 'per_person': True},
    ]

    created = []
    for data in extra_defs:
        if not db.query(ExtraService).filter(ExtraService.name == data['name']).first():
            db.add(ExtraService(**data))
            created.append(data['name'])

    db.commit()
    print(f"Extra services: {len(created)} created")


def init_users(db):
    """Default accounts"""
    user_defs = [
        ('manager', 'Maria Manager', UserRole.MANAGER),
        ('front1', 'Felix Front', UserRole.RECEPTIONIST),
        ('guest1', 'Gina Guest', UserRole.GUEST),
    ]

    created = []
    for username, name, role in user_defs:
        if not db.query(User).filter(User.username == username).first():
            db.add(User(
                username=username,
                password_hash=get_password_hash('123456'),
                name=name,
                role=role,
                is_active=True
            ))
            created.append(username)

    db.commit()
    print(f"Users: {len(created)} created")


def seed(db):
    """Seed all catalog data and accounts; safe to run repeatedly"""
    categories = init_room_categories(db)
    init_rooms(db, categories)
    init_extras(db)
    init_users(db)


def main():
    init_db()
    db = SessionLocal()
    try:
        seed(db)
        print("Default accounts (password 123456): manager, front1, guest1")
    finally:
        db.close()


if __name__ == '__main__':
    main()
