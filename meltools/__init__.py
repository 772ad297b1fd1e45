"""Editor toolkit: buffer search and replace, the MEL stack language, Blowfish file encryption and MD5 digests."""

__version__ = "0.1.0"