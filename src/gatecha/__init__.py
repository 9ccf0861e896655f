"""GateCHA: a self-hosted proof-of-work captcha verification gateway."""

__version__ = "0.1.0"
