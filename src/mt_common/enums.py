"""Global enums — values match the stored document fields exactly."""

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    EXCHANGE = "exchange"


class TransferDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class CommissionType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class AssignmentType(str, Enum):
    """private = only this exchange, public = shared with others"""
    PRIVATE = "private"
    PUBLIC = "public"


class CliqType(str, Enum):
    ALIAS = "alias"
    MOBILE = "mobile"


class Collection(str, Enum):
    """Document store collection names."""
    PLATFORM_BANKS = "platformBanks"
    BANK_ASSIGNMENTS = "bankAssignments"
    USERS = "users"
