"""
Tests for trips, rosters and quick stats.
"""
from datetime import date
from decimal import Decimal
from app.models.trip import Participant, TripStatus
from app.schemas.expense import ExpenseCreate
from app.schemas.trip import TripCreate, TripUpdate
from app.schemas.trip_content import DocumentCreate, ItineraryItemCreate, NoteCreate, PlaceCreate
from app.services import expense_service, trip_content_service, trip_service
from app.services.stats_service import quick_stats


def test_trip_created_with_roster(trip):
    assert [p.name for p in trip.participants] == ["Juan", "Vale"]
    assert [p.display_order for p in trip.participants] == [0, 1]


def test_duplicate_roster_names_rejected(db):
    data = TripCreate(
        name="Bariloche", start_date=date(2027, 7, 1), end_date=date(2027, 7, 10),
        participants=["Juan", "Juan"],
    )
    assert trip_service.create_trip(data, db) is None


def test_status_from_dates():
    today = date(2026, 12, 5)
    assert trip_service.compute_trip_status(date(2026, 12, 10), date(2026, 12, 20), today) == TripStatus.UPCOMING
    assert trip_service.compute_trip_status(date(2026, 12, 1), date(2026, 12, 10), today) == TripStatus.ONGOING
    assert trip_service.compute_trip_status(date(2026, 11, 1), date(2026, 11, 10), today) == TripStatus.FINISHED


def test_countdown(trip):
    assert trip_service.countdown_message(trip, date(2026, 11, 21)) == "10 days to go"
    assert trip_service.countdown_message(trip, date(2026, 11, 30)) == "The trip starts tomorrow!"
    assert trip_service.countdown_message(trip, date(2026, 12, 1)) == "We are in Orlando!"
    assert trip_service.countdown_message(trip, date(2026, 12, 16)) == "The trip is over"

    countdown = trip_service.get_countdown(trip, date(2026, 12, 15))
    assert countdown["on_trip"] is True
    assert countdown["trip_over"] is False
    assert countdown["days_until"] == -14


def test_update_trip_recomputes_status(db, trip):
    updated = trip_service.update_trip(
        trip, TripUpdate(start_date=date(2020, 1, 1), end_date=date(2020, 1, 10)), db
    )
    assert updated.status == TripStatus.FINISHED


def test_update_trip_ignores_null_required_fields(db, trip):
    updated = trip_service.update_trip(
        trip, TripUpdate(name=None, start_date=None, end_date=None, fallback_rate=None, destination=None), db
    )
    assert updated.name == "Orlando 2026"
    assert updated.start_date == date(2026, 12, 1)
    assert updated.end_date == date(2026, 12, 15)
    assert updated.fallback_rate == Decimal("1200")
    assert updated.destination is None


def test_add_and_rename_participant(db, trip):
    ana = trip_service.add_participant(trip.id, "Ana", db)
    assert ana.display_order == 2
    assert trip_service.add_participant(trip.id, "Ana", db) is None

    renamed = trip_service.rename_participant(trip.id, ana.id, "Anita", db)
    assert renamed.name == "Anita"
    assert trip_service.rename_participant(trip.id, ana.id, "Juan", db) is None
    assert [p.name for p in trip_service.get_roster(trip.id, db)] == ["Juan", "Vale", "Anita"]


def test_participant_with_payments_cannot_be_removed(db, trip, juan, vale):
    expense_service.create_expense(
        trip.id,
        ExpenseCreate(date=date(2026, 12, 1), description="Taxi", amount=Decimal("20"), payer_id=juan.id),
        db,
        rate=Decimal("1000"),
    )

    assert trip_service.remove_participant(trip.id, juan.id, db) is False
    assert trip_service.remove_participant(trip.id, vale.id, db) is True
    assert trip_service.remove_participant(trip.id, vale.id, db) is True
    assert db.query(Participant).count() == 1


def test_delete_trip(db, trip):
    assert trip_service.delete_trip(trip.id, db) is True
    assert trip_service.get_trip(trip.id, db) is None
    assert db.query(Participant).count() == 0


def test_quick_stats(db, trip, juan, vale):
    for amount, payer in ((Decimal("100"), juan), (Decimal("50"), vale)):
        expense_service.create_expense(
            trip.id,
            ExpenseCreate(date=date(2026, 12, 2), description="Park", amount=amount, payer_id=payer.id),
            db,
            rate=Decimal("1000"),
        )
    trip_content_service.create_itinerary_item(
        trip.id, ItineraryItemCreate(date=date(2026, 12, 2), title="Magic Kingdom"), db
    )
    place = trip_content_service.create_place(trip.id, PlaceCreate(name="Chef Mickey's", kind="restaurant"), db)
    trip_content_service.create_place(trip.id, PlaceCreate(name="Outlet", kind="shop"), db)
    trip_content_service.toggle_visited(place.id, trip.id, db)
    trip_content_service.create_note(trip.id, NoteCreate(title="Sunscreen", kind="pack"), db)
    trip_content_service.create_document(
        trip.id, DocumentCreate(name="Passport", file_url="https://files.example.com/passport.pdf"), db
    )

    stats = quick_stats(trip, db, today=date(2026, 11, 21))

    assert stats["countdown"]["message"] == "10 days to go"
    assert stats["total_spent_base"] == Decimal("150.00")
    assert stats["paid_by"] == {"Juan": Decimal("100.00"), "Vale": Decimal("50.00")}
    assert stats["debtor"] == "Vale"
    assert stats["difference"] == Decimal("25.00")
    assert stats["plans_progress"] == 0
    assert stats["itinerary_count"] == 1
    assert stats["places_visited"] == 1
    assert stats["places_pending"] == 1
    assert stats["notes_count"] == 1
    assert stats["documents_count"] == 1
