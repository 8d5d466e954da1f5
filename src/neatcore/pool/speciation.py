"""
NEAT Speciation Module

This module implements the compatibility distance and the speciation
mechanism of the NEAT algorithm.

Speciation in NEAT:
In traditional genetic algorithms, new structural innovations often have lower
initial fitness and are quickly eliminated. NEAT addresses this by organizing
the population into species - groups of genetically similar genomes that
compete primarily within their own niche. This allows novel structures time to
optimize before facing global competition.

How Speciation Works:
1. Calculate genetic distance between genomes using the NEAT distance formula
2. Visit the genomes in population order; assign each one to the first species
   whose representative is within the compatibility threshold
3. Create a new species for a genome that doesn't fit any existing species;
   the genome becomes its representative

The assignment is greedy and depends on the order of the population: reordering
the population may change the species boundaries. The speciator keeps no state
between calls; species lifecycle (stagnation, extinction, offspring allocation)
belongs to the caller, which receives the membership of every species.

Classes:
    Species: A species: its ID, its representative and its members

Functions:
    distance(genome_a, genome_b):              Calculate the compatibility distance between two genomes
    speciate(population, threshold):           Partition a population into species
    species_membership(species):               Map every genome (by index) to its species ID
"""

from itertools import count
from typing    import TYPE_CHECKING, Sequence

from loguru import logger

if TYPE_CHECKING:
    from neatcore.genotype.genome import Genome
    from neatcore.run.config      import Config

def distance(genome_a: 'Genome', genome_b: 'Genome', config: 'Config | None' = None) -> float:
    """
    Calculate genetic distance between two genomes using the original NEAT formula.

    The original NEAT formula only looks at connections.
       distance = (c1 * E + c2 * D) / N + c3 * W̄

    Where:
    - E = number of excess connection genes
    - D = number of disjoint connection genes
    - N = number of connection genes in larger genome (1 if this is
          smaller than 'distance_normalize_threshold')
    - W̄ = average weight difference of matching connection genes
    - c1, c2, c3 = weight of various terms (from configuration file)

    Parameters:
        genome_a: the first genome
        genome_b: the second genome
        config:   the coefficients to use ('genome_a.config' if not specified)

    Returns:
        the NEAT distance between the two genomes
    """
    config = config if config is not None else genome_a.config

    # Get innovation numbers from both genomes
    innovs_a = set(genome_a.conn_genes.keys())
    innovs_b = set(genome_b.conn_genes.keys())
    if not innovs_a and not innovs_b:
        return 0.0

    # Find matching, disjoint, and excess genes
    matching_innovs     =  innovs_a & innovs_b
    non_matching_innovs = (innovs_a | innovs_b) - matching_innovs

    max_innov_a = max(innovs_a) if innovs_a else -1
    max_innov_b = max(innovs_b) if innovs_b else -1
    excess_from = min(max_innov_a, max_innov_b)

    # Excess   genes: beyond the smaller genome's max innovation number
    # Disjoint genes: within the overlapping range but not matching
    num_excess   = sum(1 for innov in non_matching_innovs if innov > excess_from)
    num_disjoint = len(non_matching_innovs) - num_excess

    # Average connection weight difference for matching connection genes
    avg_weight_diff = 0.0
    if matching_innovs:
        weight_diff = sum(abs(genome_a.conn_genes[i].weight - genome_b.conn_genes[i].weight) for i in matching_innovs)
        avg_weight_diff = weight_diff / len(matching_innovs)

    # Small genomes are not normalized
    N = max(len(innovs_a), len(innovs_b))
    if N < config.distance_normalize_threshold:
        N = 1

    return ((config.distance_excess_coeff   * num_excess +
             config.distance_disjoint_coeff * num_disjoint) / N +
             config.distance_weight_coeff   * avg_weight_diff)

class Species:
    """
    A species representing a cluster of genetically similar genomes in NEAT.

    Species are computed fresh by every call to 'speciate'. A species keeps
    the genomes assigned to it, in population order, together with their
    positions in the population.

    Public Attributes:
        id:             Unique species identifier
        representative: Genome used for distance calculations during speciation
        members:        The genomes that are part of this species
        member_indices: The positions of the members in the population

    Public Methods:
        distance_to(genome):       Calculate genetic distance to a genome
        shared_fitness(fitnesses): Apply explicit fitness sharing to the members' fitnesses
    """

    def __init__(self, species_id: int, representative: 'Genome'):
        self.id            : int            = species_id
        self.representative: 'Genome'       = representative
        self.members       : list['Genome'] = []
        self.member_indices: list[int]      = []

    def add(self, genome: 'Genome', index: int) -> None:
        self.members.append(genome)
        self.member_indices.append(index)

    def distance_to(self, genome: 'Genome', config: 'Config | None' = None) -> float:
        """
        Calculate the genetic distance between this species and a given genome.
        Uses the species representative for comparison.
        """
        return distance(self.representative, genome, config)

    def shared_fitness(self, fitnesses: Sequence[float]) -> list[float]:
        """
        Explicit fitness sharing: divide the fitness of every member by the size of the species.

        Parameters:
            fitnesses: the raw fitness of every member, in the order of 'members'

        Returns:
            the shared fitness of every member, in the same order
        """
        if len(fitnesses) != len(self.members):
            raise ValueError(f"Expected {len(self.members)} fitness values, got {len(fitnesses)}")
        return [fitness / len(self.members) for fitness in fitnesses]

    def __len__(self):
        return len(self.members)

    def __repr__(self):
        return f"Species(id={self.id}, size={len(self.members)})"

def speciate(population     : Sequence['Genome'],
             threshold      : float,
             representatives: dict[int, 'Genome'] | None = None,
             config         : 'Config | None' = None) -> dict[int, 'Species']:
    """
    Assign all genomes in a population to species based on genetic similarity.

    Each genome, in population order, is compared against the representative of
    every species created so far (the carried-over species first, in ID order,
    then the new ones in creation order), and joins the first species whose
    representative is closer than 'threshold'. A genome which fits no species
    founds a new one and becomes its representative.

    Postconditions:
        - Every genome in the population is a member of exactly one species
        - Carried-over species may have no members; the caller decides what to do with them

    Parameters:
        population:      the genomes to speciate
        threshold:       genomes closer than this to a representative join its species
        representatives: species ID => representative genome, carried over from
                         the previous generation (no species if not specified)
        config:          the distance coefficients (each representative's config if not specified)

    Returns:
        species ID => Species
    """
    representatives = representatives or {}

    species: dict[int, Species] = {spec_id: Species(spec_id, rep)
                                   for spec_id, rep in sorted(representatives.items())}
    id_generator = count(max(species, default=0) + 1)

    for index, genome in enumerate(population):
        for spec in species.values():   # dicts keep insertion order: carried-over first
            if spec.distance_to(genome, config) < threshold:
                spec.add(genome, index)
                break

        # No species is similar enough, create a new species,
        # with this genome as its species representative.
        else:
            spec = Species(next(id_generator), genome)
            spec.add(genome, index)
            species[spec.id] = spec

    logger.debug("Speciated {} genomes into {} species ({} empty)",
                 len(population), len(species), sum(1 for spec in species.values() if not spec.members))
    return species

def species_membership(species: dict[int, Species]) -> dict[int, int]:
    """
    Map the position of every genome in the population to the ID of its species.
    """
    return {index: spec_id
            for spec_id, spec in species.items()
            for index in spec.member_indices}
