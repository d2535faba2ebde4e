import enum


class UserRole(str, enum.Enum):
    SHOPKEEPER = "SHOPKEEPER"
    CUSTOMER = "CUSTOMER"


class ItemStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    CLAIMED = "CLAIMED"
    EXPIRED = "EXPIRED"
    DELETED = "DELETED"


class ClaimStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ConversationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class FriendshipStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class MessageType(str, enum.Enum):
    TEXT = "TEXT"
    AUDIO = "AUDIO"
    IMAGE = "IMAGE"


class NotificationType(str, enum.Enum):
    FRIEND_REQUEST = "FRIEND_REQUEST"
    FRIEND_ACCEPT = "FRIEND_ACCEPT"
    SYSTEM = "SYSTEM"
    MESSAGE = "MESSAGE"
