"""Client version."""

CLIENT_VERSION = "0.9.0"
