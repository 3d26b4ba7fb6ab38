"""Country lookup for the address that served a preview.

The database is opened lazily on first use and kept open, read-only, for the
lifetime of the process. Concurrent lookups share the one reader.
"""

import logging
from typing import Optional, Protocol

import maxminddb

from linkpreview.config import GEOIP_DB_PATH
from linkpreview.errors import GeoDatabaseError

logger = logging.getLogger(__name__)


class CountryLookup(Protocol):
    def lookup_country(self, ip) -> Optional[str]:
        ...


class MaxMindCountryLookup:
    """``CountryLookup`` backed by a MaxMind country database file."""

    def __init__(self, path: str):
        self.path = path
        self._reader = None

    def _get_reader(self):
        if self._reader is None:
            try:
                self._reader = maxminddb.open_database(self.path)
            except (OSError, ValueError, maxminddb.InvalidDatabaseError) as e:
                raise GeoDatabaseError(f"Failed to open geoip database: {self.path!r}") from e
            logger.info("Opened geoip database %s", self.path)
        return self._reader

    def lookup_country(self, ip) -> Optional[str]:
        """Return the ISO country code for *ip*, or ``None`` on a miss."""
        reader = self._get_reader()
        try:
            record = reader.get(ip)
        except (OSError, maxminddb.InvalidDatabaseError) as e:
            raise GeoDatabaseError(f"Failed to read geoip database: {self.path!r}") from e
        except ValueError:
            return None
        if not isinstance(record, dict):
            return None
        country = record.get("country")
        if not isinstance(country, dict):
            return None
        return country.get("iso_code")

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None


_default_lookup: Optional[MaxMindCountryLookup] = None


def get_default_lookup() -> MaxMindCountryLookup:
    """Return the process-wide lookup for ``GEOIP_DB_PATH``."""
    global _default_lookup
    if _default_lookup is None:
        _default_lookup = MaxMindCountryLookup(GEOIP_DB_PATH)
    return _default_lookup
