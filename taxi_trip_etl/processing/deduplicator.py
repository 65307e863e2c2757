# taxi_trip_etl/processing/deduplicator.py
"""
Identity-based deduplication of validated trips
"""

from typing import Dict, List

from taxi_trip_etl.models.taxi_trip import TaxiTrip, TripIdentity


class TripDeduplicator:
    """
    First-write-wins registry of trips keyed by TripIdentity

    Only pickup time, dropoff time and passenger count take part in the
    identity; the remaining fields are carried along but ignored.
    """

    def __init__(self):
        self._canonical: Dict[TripIdentity, TaxiTrip] = {}

    def register(self, trip: TaxiTrip) -> bool:
        """
        Test-and-set a trip's identity

        Returns:
            True if the trip is now canonical, False if its identity was
            already taken by an earlier trip
        """
        identity = trip.identity
        if identity in self._canonical:
            return False
        self._canonical[identity] = trip
        return True

    def canonical_records(self) -> List[TaxiTrip]:
        """Canonical trips in first-seen order"""
        return list(self._canonical.values())

    def __contains__(self, trip: object) -> bool:
        return isinstance(trip, TaxiTrip) and trip.identity in self._canonical

    def __len__(self) -> int:
        return len(self._canonical)
