"""
NEAT Mutation Module

This module implements the mutation operators for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm. Every operator alters
a Genome in place; the structural ones consult the InnovationRegistry
for the identifiers of the structure they introduce.

An operator that rejects its arguments raises InvalidTopology before
touching the genome, so a rejected mutation leaves the genome unchanged.

Functions:
    add_node(genome, split_connection, registry):         Split a connection with a new hidden node
    add_connection(genome, source, target, weight, registry): Connect two existing nodes
    mutate_weights(genome, rate, power):                   Perturb or replace connection weights
    toggle_connection_enabled(genome):                     Flip the enabled flag of a random connection
    mutate(genome, registry):                              Apply all mutations stochastically
"""

import random
from typing import TYPE_CHECKING

from loguru import logger

from neatcore.errors                        import InvalidTopology
from neatcore.genotype.connection_gene      import ConnectionGene
from neatcore.genotype.node_gene            import NodeGene, NodeType
if TYPE_CHECKING:
    from neatcore.genotype.genome              import Genome
    from neatcore.genotype.innovation_registry import InnovationRegistry

def add_node(genome          : 'Genome',
             split_connection: ConnectionGene,
             registry        : 'InnovationRegistry') -> NodeGene:
    """
    Split an existing connection by adding a new node.

    The split connection is disabled and replaced by two new connections
    going through a new hidden node: the first one has weight 1.0, the second
    one inherits the weight of the split connection, so the new network
    initially behaves close to the old one.

    The identity of the new node and the innovation numbers of the two new
    connections come from the registry, keyed by the innovation number of
    the split connection: the same split yields the same genes in every genome.

    Parameters:
        genome:           the genome to modify
        split_connection: the (enabled) connection to split
        registry:         the run's innovation registry

    Returns:
        the gene describing the new node

    Raises:
        InvalidTopology: if the connection is not part of the genome, is disabled,
                         or this genome already holds the node created by this split
    """
    conn = genome.conn_genes.get(split_connection.innovation)
    if conn is None or conn.key != split_connection.key:
        raise InvalidTopology(f"connection {split_connection.innovation} is not part of the genome")
    if not conn.enabled:
        raise InvalidTopology(f"cannot split disabled connection {conn.innovation}")

    # From the registry, get the ID for the new node and the
    # innovation numbers (connection IDs) for the two new connections
    new_node_id, innov1, innov2 = registry.get_split_ids(conn)

    # NOTE: a connection cannot be split twice in the same genome (the same
    #       split always gives the same node, which would be duplicated).
    if new_node_id in genome.node_genes or innov1 in genome.conn_genes or innov2 in genome.conn_genes:
        raise InvalidTopology(f"connection {conn.innovation} was already split in this genome")

    # The connection being split must be disabled.
    conn.enabled = False

    # Create the gene describing the new node (it is a hidden node)
    new_node = NodeGene(new_node_id, NodeType.HIDDEN, split_of=conn.innovation)
    genome.node_genes[new_node_id] = new_node

    # First new connection: input -> new node (weight = 1.0)
    genome.conn_genes[innov1] = ConnectionGene(conn.node_in, new_node_id, 1.0, innov1)

    # Second new connection: new node -> output (weight = old weight).
    # If the split connection closed a cycle, so does this one.
    genome.conn_genes[innov2] = ConnectionGene(new_node_id, conn.node_out, conn.weight, innov2,
                                               recurrent=conn.recurrent)
    return new_node

def add_connection(genome  : 'Genome',
                   source  : int,
                   target  : int,
                   weight  : float,
                   registry: 'InnovationRegistry') -> ConnectionGene:
    """
    Add a new connection between two existing nodes.

    We cannot add a connection:
     + referencing a node which is not part of the genome
     + ending at an INPUT or BIAS node
     + starting at an OUTPUT node (unless recurrent connections are allowed)
     + between two nodes already connected by a direct connection (enabled or not)
     + which would create a cycle (unless recurrent connections are allowed)

    Parameters:
        genome:   the genome to modify
        source:   ID of the node where the connection starts
        target:   ID of the node where the connection ends
        weight:   weight of the new connection
        registry: the run's innovation registry

    Returns:
        the gene describing the new connection

    Raises:
        InvalidTopology: if any of the constraints above is violated
    """
    allow_recurrent = genome.config.allow_recurrent

    # Carry out quick checks first
    if source not in genome.node_genes:
        raise InvalidTopology(f"source node {source} is not part of the genome")
    if target not in genome.node_genes:
        raise InvalidTopology(f"target node {target} is not part of the genome")
    if genome.node_genes[target].type.is_source:
        raise InvalidTopology(f"connection cannot end at {genome.node_genes[target].type.name} node {target}")
    if genome.node_genes[source].type == NodeType.OUTPUT and not allow_recurrent:
        raise InvalidTopology(f"connection cannot start at OUTPUT node {source}")
    if genome.find_connection(source, target) is not None:
        raise InvalidTopology(f"connection {source} -> {target} already exists")

    # Carry out expensive check last
    creates_cycle = genome.would_create_cycle(source, target)
    if creates_cycle and not allow_recurrent:
        raise InvalidTopology(f"connection {source} -> {target} would create a cycle")

    # Success - add connection gene to the genome
    innovation = registry.get_innovation_number(source, target)
    if innovation in genome.conn_genes:
        raise InvalidTopology(f"innovation {innovation} is already used in the genome")
    new_connection = ConnectionGene(source, target, weight, innovation, recurrent=creates_cycle)
    genome.conn_genes[innovation] = new_connection
    return new_connection

def mutate_weights(genome: 'Genome', rate: float, power: float, rng=None) -> None:
    """
    Mutate the weight of every connection independently: with probability
    'rate' the weight is perturbed by a uniform amount in [-power, power],
    otherwise it may be replaced by a fresh random weight
    (with probability 'config.weight_replace_prob').
    """
    config = genome.config
    for conn in genome.conn_genes.values():
        conn.mutate(rate, power, config.weight_replace_prob, config.min_weight, config.max_weight, rng)

def toggle_connection_enabled(genome: 'Genome', rng=None) -> ConnectionGene:
    """
    Flip the enabled flag of a randomly chosen connection.

    If 'config.keep_outputs_reachable' is set, disabling a connection is not
    allowed to leave an output node, which could be reached from the input
    nodes before, unreachable from all of them. Otherwise the toggle is
    unconstrained.

    Returns:
        the toggled connection

    Raises:
        InvalidTopology: if the genome has no connections, or the
                         reachability constraint would be violated
    """
    rng = rng if rng is not None else random

    if not genome.conn_genes:
        raise InvalidTopology("the genome has no connection to toggle")
    conn = rng.choice(list(genome.conn_genes.values()))

    # Enabling a connection never reduces reachability
    if not conn.enabled or not genome.config.keep_outputs_reachable:
        conn.enabled = not conn.enabled
        return conn

    reachable_before = genome.reachable_outputs()
    conn.enabled     = False
    reachable_after  = genome.reachable_outputs()
    if reachable_after < reachable_before:
        conn.enabled = True
        lost = sorted(reachable_before - reachable_after)
        raise InvalidTopology(f"disabling connection {conn.innovation} leaves outputs {lost} unreachable")
    return conn

def random_weight(genome: 'Genome', rng=None) -> float:
    """Draw a weight for a new connection, according to the configuration."""
    rng    = rng if rng is not None else random
    config = genome.config
    weight = rng.gauss(config.weight_init_mean, config.weight_init_stdev)
    return max(config.min_weight, min(config.max_weight, weight))   # Clip it

def mutate_add_node(genome: 'Genome', registry: 'InnovationRegistry', rng=None) -> NodeGene:
    """
    Split a connection selected at random among the 'enabled' connections
    which have not been split in this genome yet.

    Raises:
        InvalidTopology: if no connection can be split
    """
    rng = rng if rng is not None else random

    candidates = [conn for conn in genome.conn_genes.values() if conn.enabled]
    rng.shuffle(candidates)
    for conn in candidates:
        try:
            return add_node(genome, conn, registry)
        except InvalidTopology:
            continue
    raise InvalidTopology("no connection can be split")

def mutate_add_connection(genome: 'Genome', registry: 'InnovationRegistry', rng=None) -> ConnectionGene:
    """
    Add a new connection between two nodes selected at random.

    To prevent an infinite loop, this function only attempts to create
    a new connection 'config.max_add_attempts' times.

    Raises:
        InvalidTopology: if no valid pair of nodes was found
    """
    rng = rng if rng is not None else random

    node_ids = list(genome.node_genes.keys())
    for _ in range(genome.config.max_add_attempts):
        node_in  = rng.choice(node_ids)
        node_out = rng.choice(node_ids)
        try:
            return add_connection(genome, node_in, node_out, random_weight(genome, rng), registry)
        except InvalidTopology:
            continue
    raise InvalidTopology(f"no valid connection found in {genome.config.max_add_attempts} attempts")

def mutate(genome: 'Genome', registry: 'InnovationRegistry', rng=None) -> None:
    """
    Apply to the genome all possible mutation operations.

    The structural mutations (add a node, add a connection, toggle a connection)
    are attempted 'config.mutation_passes' times, each with its own probability.
    An attempt which turns out to be impossible is skipped. Then the weights of
    all connections are mutated.
    """
    rng    = rng if rng is not None else random
    config = genome.config

    for _ in range(config.mutation_passes):
        if rng.random() < config.node_add_probability:
            _attempt(mutate_add_node, genome, registry, rng)
        if rng.random() < config.connection_add_probability:
            _attempt(mutate_add_connection, genome, registry, rng)
        if rng.random() < config.connection_toggle_probability:
            _attempt(lambda g, _, r: toggle_connection_enabled(g, r), genome, registry, rng)

    mutate_weights(genome, config.weight_mutate_rate, config.weight_mutate_power, rng)

def _attempt(operator, genome, registry, rng) -> None:
    try:
        operator(genome, registry, rng)
    except InvalidTopology as exc:
        logger.debug("Skipped mutation: {}", exc)
