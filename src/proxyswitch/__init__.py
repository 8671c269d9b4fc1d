"""proxyswitch — terminal switcher for Clash/Mihomo proxy groups."""

__version__ = "0.3.0"
