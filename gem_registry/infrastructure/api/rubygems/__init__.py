"""
RubyGems API Infrastructure
"""

from .client import RubyGemsClient, format_rfc3339
from .mirrors import (
    MIRRORS,
    SERVER_URL_RUBY_CHINA,
    SERVER_URL_TSINGHUA,
    SERVER_URL_ALIYUN,
    get_mirror_url,
    resolve_server_url,
    create_mirror_client,
)

__all__ = [
    # Client
    "RubyGemsClient",
    "format_rfc3339",

    # Mirrors
    "MIRRORS",
    "SERVER_URL_RUBY_CHINA",
    "SERVER_URL_TSINGHUA",
    "SERVER_URL_ALIYUN",
    "get_mirror_url",
    "resolve_server_url",
    "create_mirror_client",
]
