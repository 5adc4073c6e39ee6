"""Enumerations shared by the router, resolver and settings."""

import enum


class OperatingMode(str, enum.Enum):
    DEVELOPMENT = "development"
    RELEASE = "release"


class FrameworkType(str, enum.Enum):
    GENERIC = "generic"
    STATIC_SITE_GENERATOR = "static_site_generator"

    @classmethod
    def _missing_(cls, value):
        # Next.js static export writes extensionless routes as .html files
        if isinstance(value, str) and value.lower() in ("nextjs", "next", "ssg"):
            return cls.STATIC_SITE_GENERATOR
        return None


class OutcomeKind(str, enum.Enum):
    SERVED = "served"
    REDIRECT = "redirect"
    NOT_FOUND = "not_found"
    FALLBACK_SERVED = "fallback_served"
