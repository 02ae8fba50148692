"""modpub - publish compiled Flutter modules to a code push service."""

__version__ = "0.1.0"
