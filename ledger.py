"""
Booking ledger: owns booking records and keeps each flight's seat counter
consistent with them.

For every flight, ``available_seats`` plus the passengers of its
non-cancelled bookings always equals the seats it started with. Every
debit is capacity-checked before it is applied, and cancelling returns
exactly the seats the booking currently holds.
"""

import logging
import threading
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog import FlightCatalog
from database import fits_integer_column
from errors import Forbidden, InsufficientCapacity, InvalidState, NotFound, ValidationError
from models import Booking, BookingStatus, utcnow
from schemas import BookingDetail, BookingOut

logger = logging.getLogger(__name__)

MIN_PASSENGERS = 1
MAX_PASSENGERS = 9

# Serializes every check-then-write on seat counters within the process.
_inventory_lock = threading.Lock()


def _check_passengers(passengers: int):
    if not MIN_PASSENGERS <= passengers <= MAX_PASSENGERS:
        raise ValidationError(
            f"Passengers must be between {MIN_PASSENGERS} and {MAX_PASSENGERS}"
        )


class BookingLedger:
    def __init__(self, db: Session, catalog: Optional[FlightCatalog] = None):
        self.db = db
        self.catalog = catalog or FlightCatalog(db)

    def create(self, caller_id: int, flight_id: Optional[int], passengers: Optional[int]) -> BookingDetail:
        if flight_id is None or passengers is None:
            raise ValidationError("flightId and passengers are required")
        _check_passengers(passengers)

        with _inventory_lock:
            flight = self.catalog.get_by_id(flight_id)
            if not flight:
                raise NotFound("Flight not found")
            if flight.available_seats < passengers:
                logger.info(
                    "Rejected booking of %d seats on flight %s: %d available",
                    passengers, flight.id, flight.available_seats,
                )
                raise InsufficientCapacity(flight.available_seats)

            booking = Booking(
                user_id=caller_id,
                flight_id=flight.id,
                passengers=passengers,
                total_price=flight.price * passengers,
                status=BookingStatus.CONFIRMED.value,
                created_at=utcnow(),
            )
            self.catalog.adjust_seats(flight.id, -passengers)
            self.db.add(booking)
            self._commit()

            logger.info(
                "Booking %s created: user %s, flight %s, %d passengers",
                booking.id, caller_id, flight.id, passengers,
            )
            return self._detail(booking)

    def modify(self, caller_id: int, booking_id: int, passengers: Optional[int] = None) -> BookingDetail:
        with _inventory_lock:
            booking = self._owned_booking(caller_id, booking_id, "modify")
            if booking.status == BookingStatus.CANCELLED:
                raise InvalidState("Cannot modify a cancelled booking")

            if passengers is not None:
                _check_passengers(passengers)
                flight = booking.flight
                seats_delta = passengers - booking.passengers
                if seats_delta > 0 and flight.available_seats < seats_delta:
                    logger.info(
                        "Rejected change of booking %s to %d passengers: %d available",
                        booking.id, passengers, flight.available_seats,
                    )
                    # The booking may grow into the seats it already holds.
                    raise InsufficientCapacity(flight.available_seats + booking.passengers)

                # A negative delta gives seats back to the flight.
                self.catalog.adjust_seats(flight.id, -seats_delta)
                booking.passengers = passengers
                booking.total_price = flight.price * passengers
                self._commit()
                logger.info("Booking %s modified: %d passengers", booking.id, passengers)

            return self._detail(booking)

    def cancel(self, caller_id: int, booking_id: int) -> BookingOut:
        with _inventory_lock:
            booking = self._owned_booking(caller_id, booking_id, "cancel")
            if booking.status == BookingStatus.CANCELLED:
                raise InvalidState("Booking is already cancelled")

            self.catalog.adjust_seats(booking.flight_id, booking.passengers)
            booking.status = BookingStatus.CANCELLED.value
            self._commit()

            logger.info(
                "Booking %s cancelled: %d seats released on flight %s",
                booking.id, booking.passengers, booking.flight_id,
            )
            return BookingOut.model_validate(booking)

    def list_for_user(self, caller_id: int) -> List[BookingDetail]:
        bookings = (
            self.db.query(Booking)
            .filter(Booking.user_id == caller_id)
            .order_by(Booking.id)
            .all()
        )
        return [self._detail(b) for b in bookings]

    def get_by_id(self, caller_id: int, booking_id: int) -> BookingDetail:
        return self._detail(self._owned_booking(caller_id, booking_id, "view"))

    def _owned_booking(self, caller_id: int, booking_id: int, action: str) -> Booking:
        booking = self.db.get(Booking, booking_id) if fits_integer_column(booking_id) else None
        if not booking:
            raise NotFound("Booking not found")
        if booking.user_id != caller_id:
            logger.warning(
                "User %s tried to %s booking %s owned by user %s",
                caller_id, action, booking.id, booking.user_id,
            )
            raise Forbidden(f"You do not have permission to {action} this booking")
        return booking

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    @staticmethod
    def _detail(booking: Booking) -> BookingDetail:
        return BookingDetail.model_validate(booking)
