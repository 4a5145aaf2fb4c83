from .user.user import User, UserRole
from .trips.trip_model import Trip, TripPoint, trip_preferences
from .preferences.preference_model import Preference, UserPreference
from .images.image_model import Image
