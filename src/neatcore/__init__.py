"""
NEAT (NeuroEvolution of Augmenting Topologies) - the evolutionary core.

This package implements the parts of the NEAT algorithm which act on genomes:
their representation, the innovation registry giving the same structural change
the same identifiers in every genome, the mutation and crossover operators,
the compatibility distance and speciation, and the evaluation of genomes as
(feed-forward or recurrent) neural networks.

The generation loop (selection, elitism, offspring allocation, stagnation) and
the fitness function belong to the caller.

The package logs through loguru at debug level and is silent by default;
call 'logger.enable("neatcore")' to see its records.

Main components:
- genotype: Genetic encoding (genomes, genes, innovation registry) and operators
- phenotype: Neural network expression (standard and fast implementations)
- pool: Speciation and parallel helpers working on whole populations
- run: Configuration
- activations: Activation functions for neural networks

Example:
    >>> from neatcore import Config, Genome, InnovationRegistry
    >>> config   = Config("config.ini")
    >>> registry = InnovationRegistry.for_config(config)
    >>> genome   = Genome.create(config.num_inputs, config.num_outputs, config.use_bias, config, registry)
    >>> child    = genome.spawn_child(registry)
    >>> outputs  = child.activate([0.0, 1.0])
"""

__version__ = "0.1.0"

from loguru import logger

# Silent until the application calls logger.enable("neatcore")
logger.disable("neatcore")

# Import main classes for convenient access
from neatcore.errors                       import InvalidTopology, NeatError, RegistryConflict, ShapeMismatch
from neatcore.run.config                   import Config
from neatcore.genotype.connection_gene     import ConnectionGene
from neatcore.genotype.crossover           import crossover
from neatcore.genotype.genome              import Genome
from neatcore.genotype.innovation_registry import InnovationRegistry
from neatcore.genotype.node_gene           import NodeGene, NodeType
from neatcore.phenotype                    import activate, max_index
from neatcore.pool.speciation              import Species, distance, speciate, species_membership

__all__ = [
    "activate",
    "Config",
    "ConnectionGene",
    "crossover",
    "distance",
    "Genome",
    "InnovationRegistry",
    "InvalidTopology",
    "max_index",
    "NeatError",
    "NodeGene",
    "NodeType",
    "RegistryConflict",
    "ShapeMismatch",
    "speciate",
    "Species",
    "species_membership",
]
