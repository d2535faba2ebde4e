from .user import User
from .item import Item
from .location import Location
from .claim import Claim
from .conversation import Conversation
from .message import Message
from .rating import Rating
from .friendship import Friendship
from .notification import Notification
