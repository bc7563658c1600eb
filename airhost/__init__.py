"""Options, metadata decoding, media helpers and service settings for an AirPlay receiver."""

__version__ = "1.71.0"