from michels_travel.models.user import LoginAttempt, User
from michels_travel.models.account import FrequentFlyerProgram, TravelerProfile, UserPreference
from michels_travel.models.booking import Booking, Lead, Passenger
from michels_travel.models.search import FlightSearch, PopularDestination, SavedRoute, UserSearchHistory
from michels_travel.models.alerts import Notification, PriceAlert
from michels_travel.models.activity import ChatConversation, NavigationHistory

__all__ = [
    "Booking",
    "ChatConversation",
    "FlightSearch",
    "FrequentFlyerProgram",
    "Lead",
    "LoginAttempt",
    "NavigationHistory",
    "Notification",
    "Passenger",
    "PopularDestination",
    "PriceAlert",
    "SavedRoute",
    "TravelerProfile",
    "User",
    "UserPreference",
    "UserSearchHistory",
]
