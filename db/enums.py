from enum import StrEnum


# Enums
class Gender(StrEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    MORE = "MORE"
    UNKNOWN = "UNKNOWN"


class MessageType(StrEnum):
    TEXT = "TEXT"
    GIF = "GIF"
    VOICE_NOTE = "VOICE_NOTE"
    GESTURE = "GESTURE"
    ACTIVITY = "ACTIVITY"
    CONTACT_CARD = "CONTACT_CARD"
    OTHER = "OTHER"


class SwipestatsTier(StrEnum):
    FREE = "FREE"
    PLUS = "PLUS"
    ELITE = "ELITE"


class SwipestatsVersion(StrEnum):
    SWIPESTATS_1 = "SWIPESTATS_1"
    SWIPESTATS_2 = "SWIPESTATS_2"
    SWIPESTATS_3 = "SWIPESTATS_3"
    SWIPESTATS_4 = "SWIPESTATS_4"


class DataProvider(StrEnum):
    TINDER = "TINDER"
    HINGE = "HINGE"
    BUMBLE = "BUMBLE"
    GRINDER = "GRINDER"
    BADOO = "BADOO"
    BOO = "BOO"
    OK_CUPID = "OK_CUPID"
    FEELD = "FEELD"


class CohortType(StrEnum):
    SYSTEM = "SYSTEM"
    USER_CUSTOM = "USER_CUSTOM"
