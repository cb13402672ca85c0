"""Version lookup utilities, isolated for cleanliness"""
from importlib.metadata import PackageNotFoundError, version


def get_active_version() -> str:
    """Get the installed version of eventrx, or "development" when running from a checkout."""
    try:
        return version("eventrx")
    except PackageNotFoundError:
        return "development"
