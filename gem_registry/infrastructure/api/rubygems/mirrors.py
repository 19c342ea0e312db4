"""
RubyGems Mirrors

Server URLs of the official registry and known mirrors.
"""

from typing import Optional, Dict

from ....core.config import DEFAULT_SERVER_URL
from ....core.exceptions import ConfigurationError

SERVER_URL_RUBY_CHINA = "https://gems.ruby-china.com"
SERVER_URL_TSINGHUA = "https://mirrors.tuna.tsinghua.edu.cn/rubygems"
SERVER_URL_ALIYUN = "https://mirrors.aliyun.com/rubygems"

MIRRORS: Dict[str, str] = {
    "official": DEFAULT_SERVER_URL,
    "ruby-china": SERVER_URL_RUBY_CHINA,
    "tsinghua": SERVER_URL_TSINGHUA,
    "aliyun": SERVER_URL_ALIYUN,
}


def get_mirror_url(name: str) -> str:
    """
    Look up a mirror by name.

    Raises:
        ConfigurationError: If the mirror is unknown
    """
    try:
        return MIRRORS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown mirror: {name}. Must be one of {sorted(MIRRORS)}",
            config_key="mirror"
        ) from None


def resolve_server_url(mirror: Optional[str], server_url: str) -> str:
    """Mirror URL when a mirror is named, otherwise server_url."""
    if mirror:
        return get_mirror_url(mirror)
    return server_url


def create_mirror_client(name: str, **kwargs):
    """
    Create a client for a named mirror.

    Args:
        name: Mirror name (official, ruby-china, tsinghua, aliyun)
        **kwargs: Additional arguments for RubyGemsClient
    """
    from .client import RubyGemsClient

    return RubyGemsClient(server_url=get_mirror_url(name), **kwargs)
