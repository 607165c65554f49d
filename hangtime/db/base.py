from hangtime.db.base_class import Base

# Import ALL models so SQLAlchemy registers them
from hangtime.models.user import User  # noqa: F401
from hangtime.models.interest import Interest  # noqa: F401
from hangtime.models.availability_interval import AvailabilityInterval  # noqa: F401
from hangtime.models.friend_link import FriendLink  # noqa: F401
from hangtime.models.hangout_proposal import HangoutProposal  # noqa: F401
