from travel_booking.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from travel_booking.infrastructure.db.repositories.listing_repo_sql import ListingRepoSQL
from travel_booking.infrastructure.db.repositories.notification_repo_sql import NotificationRepoSQL

__all__ = ["BookingRepoSQL", "ListingRepoSQL", "NotificationRepoSQL"]
