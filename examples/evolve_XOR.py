"""
XOR Problem Implementation for NEAT

This module evolves networks solving the classic XOR (exclusive OR) problem,
a benchmark for topology-evolving algorithms: XOR is not linearly separable,
so a solution needs at least one hidden node.

    Input (0, 0) → Output 0
    Input (0, 1) → Output 1
    Input (1, 0) → Output 1
    Input (1, 1) → Output 0

Fitness Function:
    Fitness = 4.0 - Σ(output - target)²

    Maximum fitness of 4.0 is achieved when all four XOR cases produce exact outputs.
    The run stops when fitness exceeds 3.9 (or after MAX_GENERATIONS generations).

The neatcore package only provides the evolutionary core (genomes, operators,
speciation, networks); the generation loop below is a deliberately small driver:
the fittest genome survives unchanged, every species reproduces in proportion
to its shared fitness, parents are drawn from the better half of their species.

Usage:
    python evolve_XOR.py [--jobs N] [--seed S]
"""

import argparse
import random
from pathlib import Path

from neatcore.genotype  import Genome, InnovationRegistry
from neatcore.phenotype import NetworkStandard
from neatcore.pool      import evaluate_fitness_all, mutate_all, speciate
from neatcore.run       import Config

MAX_GENERATIONS   = 300
FITNESS_THRESHOLD = 3.9

XOR_INPUTS  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
XOR_OUTPUTS = [0.0, 1.0, 1.0, 0.0]

def evaluate_fitness(genome: Genome) -> float:
    """Test the network on all 4 XOR cases."""
    network = NetworkStandard(genome)
    fitness = 4.0  # max possible fitness
    for inputs, target in zip(XOR_INPUTS, XOR_OUTPUTS):
        output   = network.forward_pass(inputs)[0]   # forward pass through network
        fitness -= (output - target) ** 2            # errors cause the fitness to decrease
    return fitness

def generation_report(generation: int, population: list[Genome], fitnesses: list[float], num_species: int):
    """Print a report describing the current generation."""
    best    = max(range(len(population)), key=lambda i: fitnesses[i])
    network = NetworkStandard(population[best])

    s  = f"===============\n"
    s += f"GENERATION {generation:04d}\n"
    s += f"number species  = {num_species}\n"
    s += f"maximum fitness = {fitnesses[best]:.4f}\n"
    s += f"hidden nodes    = {network.number_nodes_hidden}\n"
    s += f"enabled conns   = {network.number_connections_enabled}\n"
    s += '\n'
    s += "input         output\n"
    s += "--------------------\n"
    for inputs in XOR_INPUTS:
        s += f"{inputs} -> {network.forward_pass(inputs)[0]:.4f}\n"
    print(s)

def run(config: Config, num_jobs: int = 1, seed: int | None = None) -> Genome:
    """
    Evolve a population until a genome solves XOR, or MAX_GENERATIONS is reached.

    Returns:
        the fittest genome found
    """
    rng        = random.Random(seed)
    registry   = InnovationRegistry.for_config(config)
    population = [Genome.create(config.num_inputs, config.num_outputs, config.use_bias, config, registry, rng)
                  for _ in range(config.population_size)]
    representatives: dict[int, Genome] = {}

    for generation in range(MAX_GENERATIONS):
        fitnesses = evaluate_fitness_all(population, evaluate_fitness, num_jobs)

        # Extinct species are dropped, the others carry a representative over
        species = speciate(population, config.compatibility_threshold, representatives)
        species = {spec_id: spec for spec_id, spec in species.items() if spec.members}
        generation_report(generation, population, fitnesses, len(species))

        elite = max(range(len(population)), key=lambda i: fitnesses[i])
        if fitnesses[elite] >= FITNESS_THRESHOLD:
            return population[elite]

        spec_ids = list(species)
        shares   = [sum(species[spec_id].shared_fitness([fitnesses[i] for i in species[spec_id].member_indices]))
                    for spec_id in spec_ids]

        children = []
        while len(children) < config.population_size - 1:
            spec    = species[rng.choices(spec_ids, weights=shares)[0]]
            ranked  = sorted(spec.member_indices, key=lambda i: fitnesses[i], reverse=True)
            parents = ranked[:max(1, len(ranked) // 2)]
            index_a, index_b = rng.choice(parents), rng.choice(parents)
            if index_a == index_b:
                children.append(population[index_a].clone())
            else:
                children.append(population[index_a].crossover(population[index_b],
                                                               fitnesses[index_a], fitnesses[index_b], rng))

        mutate_all(children, registry, num_jobs=num_jobs, rng_seed=rng.getrandbits(32))
        population      = [population[elite].clone()] + children
        representatives = {spec_id: rng.choice(spec.members) for spec_id, spec in species.items()}

    return population[0]   # the fittest genome of the last evaluated generation

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Evolve networks solving XOR")
    parser.add_argument("--jobs", type=int, default=1   , help="number of parallel workers")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args()

    config = Config(str(Path(__file__).parent / "config_xor.ini"))
    fittest = run(config, args.jobs, args.seed)
    print(fittest)

    # Visualize the network
    try:
        NetworkStandard(fittest).visualize()
        print("Network visualization saved as 'Digraph.gv.pdf'")
    except Exception as e:
        print(f"Could not visualize network: {e}")
