"""
Configuration from environment. Call load_dotenv() before importing this module.
"""
import os

# Overall deadline for one preview (DNS + connect + TLS + body + geoip).
PREVIEW_TIMEOUT = float(os.getenv("PREVIEW_TIMEOUT", "10") or "10")

# Bodies advertised at or above this size are never downloaded.
DOWNLOAD_THRESHOLD = 5 * 1024 * 1024  # 5 MiB

USER_AGENT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"

GEOIP_DB_PATH = (os.getenv("GEOIP_DB_PATH", "./GeoLite2-Country.mmdb") or "./GeoLite2-Country.mmdb").strip()

# Messages starting with the nickname get a short acknowledgement.
BOT_NICKNAME = (os.getenv("BOT_NICKNAME", "waflz") or "waflz").strip()
PING_REPLY = ":)"


def parse_channels(value: str) -> frozenset:
    """Parse a comma separated channel list, ignoring blanks."""
    return frozenset(c.strip() for c in (value or "").split(",") if c.strip())


# Channels the bot reads but never answers in.
READONLY_CHANNELS = parse_channels(os.getenv("READONLY_CHANNELS", ""))
