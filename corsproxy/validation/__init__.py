from .host_validator import is_valid_host, is_valid_ipv4, is_valid_ipv6, has_valid_tld

__all__ = ["is_valid_host", "is_valid_ipv4", "is_valid_ipv6", "has_valid_tld"]
