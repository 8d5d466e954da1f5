"""
NEAT Crossover Module

This module implements the crossover operator for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Functions:
    crossover(parent_a, parent_b, fitness_a, fitness_b): Create offspring by crossing two genomes
"""

import copy
import random
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from neatcore.genotype.genome import Genome

def crossover(parent_a : 'Genome',
              parent_b : 'Genome',
              fitness_a: float,
              fitness_b: float,
              rng=None) -> 'Genome':
    """
    Perform NEAT crossover between two genomes to create offspring.

    Connection genes of the two parents are aligned by innovation number.

    NEAT crossover rules:
    - Matching genes: inherited once, the weight coming from either parent at random
      (or being the average of the parents' weights, if 'matching_weight_policy' is
      "average"). If the gene is disabled in either parent, it is disabled in the
      offspring with probability 'disabled_gene_inherit_prob'.
    - Disjoint/excess genes: inherited from the fitter parent only. When both parents
      are equally fit, 'crossover_tie_policy' decides: "random" picks one parent,
      "first" picks 'parent_a', "mixed" takes them from both parents.

    The offspring holds copies of the parents' genes, never the genes themselves.
    The configuration is taken from 'parent_a'.

    Parameters:
        parent_a:  the first parent genome
        parent_b:  the second parent genome
        fitness_a: fitness of the first parent
        fitness_b: fitness of the second parent
        rng:       source of randomness (the 'random' module if not specified)

    Returns:
        New offspring genome
    """
    rng    = rng if rng is not None else random
    config = parent_a.config

    # Create offspring genome, holding only the input, bias and output nodes
    offspring = type(parent_a)(config)

    # Start by deciding which connections are part of the new network.
    # Once this is decided, the ends of these connections give us the
    # set of nodes which are part of the new network.

    # ----------------

    # Get connection innovation numbers from both parents
    innovs_a = set(parent_a.conn_genes.keys())
    innovs_b = set(parent_b.conn_genes.keys())

    # Categorize connection genes
    matching_innovs = innovs_a & innovs_b   # conn genes shared by both genomes
    only_a_innovs   = innovs_a - innovs_b   # conn genes present only in 'parent_a'
    only_b_innovs   = innovs_b - innovs_a   # conn genes present only in 'parent_b'

    # Matching connections
    for innov in sorted(matching_innovs):
        conn_a = parent_a.conn_genes[innov]
        conn_b = parent_b.conn_genes[innov]

        conn_gene = copy.copy(conn_a if rng.random() < 0.5 else conn_b)
        if config.matching_weight_policy == "average":
            conn_gene.weight = (conn_a.weight + conn_b.weight) / 2.0

        # Handle 'enabled' status: if disabled in either parent,
        # the gene is disabled with the configured probability
        if not conn_a.enabled or not conn_b.enabled:
            conn_gene.enabled = rng.random() >= config.disabled_gene_inherit_prob

        offspring.conn_genes[innov] = conn_gene

    # Disjoint & excess connections
    if fitness_a > fitness_b:
        extra_genes = [parent_a.conn_genes[innov] for innov in only_a_innovs]
    elif fitness_b > fitness_a:
        extra_genes = [parent_b.conn_genes[innov] for innov in only_b_innovs]
    elif config.crossover_tie_policy == "first":
        extra_genes = [parent_a.conn_genes[innov] for innov in only_a_innovs]
    elif config.crossover_tie_policy == "mixed":
        extra_genes = ([parent_a.conn_genes[innov] for innov in only_a_innovs] +
                       [parent_b.conn_genes[innov] for innov in only_b_innovs])
    elif rng.random() < 0.5:
        extra_genes = [parent_a.conn_genes[innov] for innov in only_a_innovs]
    else:
        extra_genes = [parent_b.conn_genes[innov] for innov in only_b_innovs]

    # NOTE: genes coming from a single parent can never conflict with each other
    #       or with the matching genes; genes mixed from both parents can.
    check_conflicts = fitness_a == fitness_b and config.crossover_tie_policy == "mixed"
    for conn_gene in sorted(extra_genes, key=lambda c: c.innovation):
        if check_conflicts:
            if offspring.find_connection(conn_gene.node_in, conn_gene.node_out) is not None:
                continue
            if not config.allow_recurrent and offspring.would_create_cycle(conn_gene.node_in, conn_gene.node_out):
                continue
        offspring.conn_genes[conn_gene.innovation] = copy.copy(conn_gene)

    # ----------------

    # Collect the IDs of all nodes needed by the offspring's connections.
    # Input, bias and output nodes are already part of the offspring.
    node_ids = set()
    for conn_gene in offspring.conn_genes.values():
        node_ids.add(conn_gene.node_in)
        node_ids.add(conn_gene.node_out)

    # Inherit node genes from whichever parent has them
    for nid in sorted(node_ids - set(offspring.node_genes)):
        if nid in parent_a.node_genes:
            node_gene = parent_a.node_genes[nid]
        elif nid in parent_b.node_genes:
            node_gene = parent_b.node_genes[nid]
        else:
            raise RuntimeError(f"node ID {nid} cannot be found in either parent")
        offspring.node_genes[nid] = copy.copy(node_gene)

    return offspring
