"""
NEAT Parallel Helpers Module

This module provides data-parallel maps over a population, built on joblib.

Fitness evaluation only reads a genome, so it runs on any joblib backend
(processes by default). Mutation alters genomes in place and consults the
innovation registry, so it runs on threads sharing memory: every worker sees
the same genomes and the same registry, whose lock arbitrates concurrent
structural mutations.

Functions:
    evaluate_fitness_all(genomes, fitness_fn): Evaluate the fitness of every genome
    mutate_all(genomes, registry):             Mutate every genome in place
"""

import random
from typing import Callable, Sequence, TYPE_CHECKING

from joblib import Parallel, delayed

if TYPE_CHECKING:
    from neatcore.genotype.genome              import Genome
    from neatcore.genotype.innovation_registry import InnovationRegistry

def evaluate_fitness_all(genomes   : Sequence['Genome'],
                         fitness_fn: Callable[['Genome'], float],
                         num_jobs  : int = 1) -> list[float]:
    """
    Evaluate the fitness of all genomes.

    Uses serial or parallel evaluation based on num_jobs:
    - num_jobs=1: Sequential evaluation in the calling thread
    - num_jobs>1 or -1: Parallel evaluation using joblib
    When evaluating in parallel with joblib's default (process based) backend,
    'fitness_fn' and the genomes must be picklable.

    Parameters:
        genomes:    the genomes to evaluate
        fitness_fn: maps a genome to its fitness
        num_jobs:   number of parallel workers for fitness evaluation

    Returns:
        the fitness of every genome, in the order of 'genomes'
    """
    if num_jobs == 1:
        return [fitness_fn(genome) for genome in genomes]
    return list(Parallel(num_jobs)(delayed(fitness_fn)(genome) for genome in genomes))

def mutate_all(genomes : Sequence['Genome'],
               registry: 'InnovationRegistry',
               num_jobs: int = 1,
               rng_seed: int | None = None) -> None:
    """
    Mutate all genomes in place (see 'Genome.mutate').

    Each genome is given its own random number generator, seeded from 'rng_seed',
    so the random choices made for a genome don't depend on how the work is split
    between workers. Structural mutations discovered concurrently by different
    workers are arbitrated by the registry: the identifiers they receive may depend
    on scheduling, but the same structural change always gets the same identifiers.

    Parameters:
        genomes:  the genomes to mutate
        registry: the run's innovation registry
        num_jobs: number of worker threads
        rng_seed: seed for the per-genome random number generators
    """
    seeder = random.Random(rng_seed)
    rngs   = [random.Random(seeder.getrandbits(64)) for _ in genomes]

    if num_jobs == 1:
        for genome, rng in zip(genomes, rngs):
            genome.mutate(registry, rng)
    else:
        Parallel(num_jobs, require="sharedmem")(delayed(genome.mutate)(registry, rng)
                                                for genome, rng in zip(genomes, rngs))
