"""
NEAT Genotype Package

This package implements the genotype representation for the NEAT (NeuroEvolution of
Augmenting Topologies) algorithm, together with the operators acting on it.

The NEAT genotype consists of two types of genes:
- Node genes:       Encode individual neurons (input, bias, hidden, output)
- Connection genes: Encode weighted connections between neurons with innovation numbers

Modules:
    node_gene:           NodeType enumeration and NodeGene class
    connection_gene:     ConnectionGene class
    innovation_registry: InnovationRegistry class and its descriptors
    mutation:            Mutation operators
    crossover:           Crossover operator
    genome:              Genome class

Exported Classes:
    NodeType:             Enumeration for node types (INPUT, BIAS, HIDDEN, OUTPUT)
    NodeGene:             Gene encoding a single network node
    ConnectionGene:       Gene encoding a weighted connection between nodes
    Genome:               Complete genome representing a neural network
    InnovationRegistry:   Run-wide tracker for innovation numbers and node IDs
    ConnectionInnovation: Registry descriptor of a new connection
    SplitInnovation:      Registry descriptor of a connection split
    SplitRecord:          Identifiers assigned to a connection split

Exported Functions:
    crossover: Create offspring by crossing two genomes
"""

from neatcore.genotype.connection_gene     import ConnectionGene
from neatcore.genotype.crossover           import crossover
from neatcore.genotype.genome              import Genome
from neatcore.genotype.innovation_registry import (ConnectionInnovation,
                                                   InnovationRegistry,
                                                   SplitInnovation,
                                                   SplitRecord)
from neatcore.genotype.node_gene           import NodeType, NodeGene

__all__ = ['ConnectionGene',
           'ConnectionInnovation',
           'crossover',
           'Genome',
           'InnovationRegistry',
           'NodeGene',
           'NodeType',
           'SplitInnovation',
           'SplitRecord']
