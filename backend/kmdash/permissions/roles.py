"""
Roles and the fixed role -> permission table.

The table is static: permissions are never stored per user. A role string
coming from the database or a request is turned into a Role exactly once,
via Role.parse, and anything unrecognised is treated as STAFF (the most
restrictive row).
"""

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"

    @classmethod
    def parse(cls, value) -> "Role":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.STAFF


ROLE_PERMISSIONS = {
    Role.ADMIN: {
        "dashboard": True,
        "inventaris": True,
        "analitik": True,
        "vendor": True,
        "pengetahuan": True,
        "users": True,
        "settings": True,
    },
    Role.MANAGER: {
        "dashboard": True,
        "inventaris": True,
        "analitik": True,
        "vendor": True,
        "pengetahuan": True,
        "users": False,
        "settings": False,
    },
    Role.STAFF: {
        "dashboard": False,
        "inventaris": True,
        "analitik": False,
        "vendor": False,
        "pengetahuan": True,
        "users": False,
        "settings": False,
    },
}

ROLE_DESCRIPTIONS = {
    Role.ADMIN: "Full access to every knowledge area and administration",
    Role.MANAGER: "Strategic insights and analytics, no user or settings administration",
    Role.STAFF: "Operational inventory data and the knowledge base",
}

# Shown to the user after login.
ROLE_KM_INSIGHTS = {
    Role.ADMIN: (
        "Anda memiliki akses penuh ke seluruh knowledge repository "
        "untuk pengambilan keputusan strategis."
    ),
    Role.MANAGER: (
        "Anda dapat mengakses strategic insights dan analytics "
        "untuk mendukung keputusan manajerial."
    ),
    Role.STAFF: (
        "Anda memiliki akses ke data operasional inventaris dan basis "
        "pengetahuan untuk mendukung tugas harian."
    ),
}
