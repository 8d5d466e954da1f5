"""
NEAT Errors Module

This module defines the exceptions raised by the NEAT engine.

Classes:
    NeatError:        Base class of all engine errors
    InvalidTopology:  A structural operation would break a genome invariant
    ShapeMismatch:    The input vector does not match the network's input layer
    RegistryConflict: The innovation registry found an inconsistent assignment
"""

class NeatError(Exception):
    """Base class of all errors raised by the NEAT engine."""

class InvalidTopology(NeatError):
    """
    A structural mutation (or a genome description) would violate a structural invariant:
    a duplicate edge, a disallowed cycle, a malformed node reference, etc.

    This error is recoverable: the genome is left unchanged, and the caller can
    retry with a different structural choice or skip the mutation.
    """

class ShapeMismatch(NeatError, ValueError):
    """The length of the input vector differs from the number of input nodes."""

class RegistryConflict(NeatError):
    """
    The innovation registry handed out (or was asked to accept) an identifier
    that is already bound to a different structural change.

    Any crossover performed after this point would align unrelated genes,
    so this error is fatal for the run and is never caught by the engine.
    """
