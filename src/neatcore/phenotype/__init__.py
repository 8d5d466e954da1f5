"""
NEAT Phenotype Package

This package expresses genomes as executable neural networks.

Modules:
    network_base:     Abstract base class shared by all network implementations
    network_standard: Object-oriented network, one input sample at a time
    network_fast:     numpy network, batches of input samples

Exported Classes:
    NetworkBase:     Abstract base class defining the network interface
    NetworkStandard: Object-oriented network
    NetworkFast:     Vectorized network

Exported Functions:
    activate(genome, inputs): Evaluate a genome on one input vector
    max_index(outputs):       Index of the largest output
"""

from typing import Sequence, TYPE_CHECKING

import numpy as np

from neatcore.phenotype.network_base     import NetworkBase
from neatcore.phenotype.network_fast     import NetworkFast
from neatcore.phenotype.network_standard import NetworkStandard
if TYPE_CHECKING:
    from neatcore.genotype import Genome

def activate(genome: 'Genome', inputs: Sequence[float]) -> list[float]:
    """
    Evaluate the network encoded by 'genome' on one input vector.

    Raises:
        ShapeMismatch: if the number of inputs differs from the number of input nodes
    """
    return NetworkStandard(genome).forward_pass(inputs)

def max_index(outputs: Sequence[float]) -> int:
    """
    Return the index of the largest output (the first one, on ties).
    Useful to read a classification from the network outputs.
    """
    if len(outputs) == 0:
        raise ValueError("Cannot take the maximum of an empty output vector")
    return int(np.argmax(outputs))

__all__ = ['activate',
           'max_index',
           'NetworkBase',
           'NetworkFast',
           'NetworkStandard']
