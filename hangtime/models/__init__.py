from hangtime.models.user import User  # noqa: F401
from hangtime.models.interest import Interest  # noqa: F401
from hangtime.models.availability_interval import AvailabilityInterval  # noqa: F401
from hangtime.models.friend_link import FriendLink, FriendLinkStatus  # noqa: F401
from hangtime.models.hangout_proposal import HangoutProposal, ProposalStatus  # noqa: F401
