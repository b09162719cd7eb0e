# Copyright (c) 2023-2024, Andrey Dubovik <andrei@dubovik.eu>

"""Exceptions raised by the Keccak sponge."""


class Sha3Error(Exception):
    """A prototype for all errors raised by this package."""


class ConfigError(Sha3Error, ValueError):
    """An invalid sponge or algorithm parameter set."""


class RangeError(Sha3Error, ValueError, IndexError):
    """A bit index or a length outside of the permitted range."""


class FormatError(Sha3Error, ValueError):
    """A malformed textual representation of a bitstring."""
