"""
NEAT Pool Package

This package works on whole populations of genomes: it partitions them
into species and maps work over them in parallel.

Modules:
    speciation: Compatibility distance, Species class and speciator
    parallel:   joblib based parallel fitness evaluation and mutation

Exported Classes:
    Species: A species: its ID, its representative and its members

Exported Functions:
    distance:             Compatibility distance between two genomes
    speciate:             Partition a population into species
    species_membership:   Map every genome (by index) to its species ID
    evaluate_fitness_all: Evaluate the fitness of every genome
    mutate_all:           Mutate every genome in place
"""

from neatcore.pool.parallel   import evaluate_fitness_all, mutate_all
from neatcore.pool.speciation import Species, distance, speciate, species_membership

__all__ = ['distance',
           'evaluate_fitness_all',
           'mutate_all',
           'speciate',
           'Species',
           'species_membership']
