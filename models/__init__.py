# models/__init__.py
from models.profile import Profile
from models.cafe import Cafe, CafeConsole
from models.booking import Booking, BookingItem
from models.consolePricing import ConsolePricing
from models.stationPricing import StationPricing
from models.membershipPlan import MembershipPlan
from models.galleryImage import GalleryImage
