import logging
from datetime import date, time
from decimal import Decimal
from typing import Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from database import fits_integer_column
from errors import NotFound
from models import Flight

logger = logging.getLogger(__name__)

# (flight_number, origin, destination, departure_date, departure_time, arrival_time, price, seats, airline)
SEED_FLIGHTS = [
    ("VL001", "Barcelona", "Madrid", "2024-06-15", "08:00", "09:15", "89.99", 120, "Vueling"),
    ("IB234", "Barcelona", "París", "2024-06-15", "10:30", "12:45", "149.99", 85, "Iberia"),
    ("RY456", "Barcelona", "Londres", "2024-06-16", "14:00", "15:30", "79.99", 150, "Ryanair"),
    ("VL002", "Madrid", "Barcelona", "2024-06-17", "18:00", "19:15", "95.99", 100, "Vueling"),
    ("IB789", "Barcelona", "Roma", "2024-06-18", "07:00", "09:00", "129.99", 90, "Iberia"),
    ("AF123", "Barcelona", "Amsterdam", "2024-06-19", "11:00", "14:00", "169.99", 75, "Air France"),
]


def _matches(value: str, needle: Optional[str]) -> bool:
    return not needle or needle.casefold() in value.casefold()


class FlightCatalog:
    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        origin: Optional[str] = None,
        destination: Optional[str] = None,
        departure_date: Optional[date] = None,
    ) -> List[Flight]:
        """
        Flights matching every given filter, in id order. Origin and
        destination match as case-insensitive substrings, the date exactly.
        """
        query = self.db.query(Flight)
        if departure_date is not None:
            query = query.filter(Flight.departure_date == departure_date)
        flights = query.order_by(Flight.id).all()

        # SQLite's lower() only folds ASCII, so text filters run here.
        return [
            f for f in flights
            if _matches(f.origin, origin) and _matches(f.destination, destination)
        ]

    def get_by_id(self, flight_id: int) -> Optional[Flight]:
        if not fits_integer_column(flight_id):
            return None
        return self.db.get(Flight, flight_id)

    def list_distinct_origins(self) -> Set[str]:
        return {row[0] for row in self.db.query(Flight.origin).distinct()}

    def list_distinct_destinations(self) -> Set[str]:
        return {row[0] for row in self.db.query(Flight.destination).distinct()}

    def adjust_seats(self, flight_id: int, delta: int) -> Flight:
        """
        Apply ``available_seats += delta`` without bounds checking; the
        booking ledger checks capacity before calling. Not committed here.
        """
        flight = self.get_by_id(flight_id)
        if not flight:
            raise NotFound("Flight not found")
        flight.available_seats += delta
        return flight

    def seed(self, rows: Iterable[tuple] = SEED_FLIGHTS) -> int:
        """Load ``rows`` into an empty catalog. Returns the number of flights added."""
        if self.db.query(Flight).count() > 0:
            logger.info("Flight catalog already seeded.")
            return 0

        added = 0
        for number, origin, destination, day, dep, arr, price, seats, airline in rows:
            self.db.add(
                Flight(
                    flight_number=number,
                    origin=origin,
                    destination=destination,
                    departure_date=date.fromisoformat(day),
                    departure_time=time.fromisoformat(dep),
                    arrival_time=time.fromisoformat(arr),
                    price=Decimal(price),
                    available_seats=seats,
                    airline=airline,
                )
            )
            added += 1
        self.db.commit()
        logger.info("Seeded flight catalog with %d flights.", added)
        return added
