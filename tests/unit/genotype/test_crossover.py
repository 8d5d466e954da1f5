"""
Unit tests for the crossover operator.

Parents are built from plain data with explicit innovation numbers,
so that matching, disjoint and excess genes are known in advance.
"""

import random

import pytest

from neatcore.genotype.crossover import crossover
from neatcore.genotype.genome import Genome
from neatcore.run.config import Config


# ============================================================================
# Helper Functions
# ============================================================================

INPUT_OUTPUT_NODES = [{"id": 0, "type": "input"},
                      {"id": 1, "type": "input"},
                      {"id": 2, "type": "output"}]

def make_genome(config, connections, hidden=()):
    """Build a 2-input, 1-output genome; 'connections' holds (innovation, from, to, weight[, enabled])."""
    nodes = INPUT_OUTPUT_NODES + [{"id": node_id, "type": "hidden"} for node_id in hidden]
    conns = []
    for conn in connections:
        innov, node_in, node_out, weight = conn[:4]
        enabled = conn[4] if len(conn) > 4 else True
        conns.append({"innovation": innov, "from": node_in, "to": node_out, "weight": weight, "enabled": enabled})
    return Genome.from_dict({"nodes": nodes, "connections": conns}, config)

def triples(genome):
    """The connection set of a genome, as (source, target, innovation) triples."""
    return {(c.node_in, c.node_out, c.innovation) for c in genome.conn_genes.values()}


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def parent_a(config):
    """Innovations {0, 1}, no hidden nodes."""
    return make_genome(config, [(0, 0, 2, 1.0), (1, 1, 2, -1.0)])


@pytest.fixture
def parent_b(config):
    """Innovations {0, 2, 3}, hidden node 3."""
    return make_genome(config, [(0, 0, 2, 3.0), (2, 0, 3, 1.0), (3, 3, 2, 0.5)], hidden=[3])


@pytest.fixture
def cycle_parents(config):
    """
    Two parents whose disjoint genes, taken together, close the cycle 3 -> 4 -> 3.
      A: 0->3 (0), 3->4 (1), 4->2 (2)
      B: 0->3 (0), 4->3 (3), 3->2 (4)
    """
    parent1 = make_genome(config, [(0, 0, 3, 1.0), (1, 3, 4, 1.0), (2, 4, 2, 1.0)], hidden=[3, 4])
    parent2 = make_genome(config, [(0, 0, 3, 1.0), (3, 4, 3, 1.0), (4, 3, 2, 1.0)], hidden=[3, 4])
    return parent1, parent2


# ============================================================================
# Test: Matching genes
# ============================================================================

class TestCrossoverMatching:
    """Test the inheritance of matching genes."""

    def test_self_crossover_keeps_all_genes(self, parent_b, rng):
        child = crossover(parent_b, parent_b, 1.0, 1.0, rng)
        assert triples(child) == triples(parent_b)
        assert set(child.node_genes) == set(parent_b.node_genes)

    def test_self_crossover_after_mutation(self, config, registry, rng):
        config.initial_cxn_policy         = "full"
        config.node_add_probability       = 0.5
        config.connection_add_probability = 0.5
        genome = Genome.create(2, 1, False, config, registry, rng)
        for _ in range(10):
            genome.mutate(registry, rng)

        child = genome.crossover(genome, 3.0, 3.0, rng)
        assert triples(child) == triples(genome)

    def test_random_weight_policy(self, parent_a, parent_b):
        weights = {crossover(parent_a, parent_b, 1.0, 1.0, random.Random(seed)).conn_genes[0].weight
                   for seed in range(30)}
        assert weights == {1.0, 3.0}

    def test_average_weight_policy(self, config, parent_a, parent_b, rng):
        config.matching_weight_policy = "average"
        child = crossover(parent_a, parent_b, 1.0, 1.0, rng)
        assert child.conn_genes[0].weight == 2.0

    def test_disabled_gene_stays_disabled(self, config, rng):
        config.disabled_gene_inherit_prob = 1.0
        parent1 = make_genome(config, [(0, 0, 2, 1.0, False)])
        parent2 = make_genome(config, [(0, 0, 2, 1.0, True)])

        for _ in range(20):
            assert not crossover(parent1, parent2, 1.0, 1.0, rng).conn_genes[0].enabled
            assert not crossover(parent2, parent1, 1.0, 1.0, rng).conn_genes[0].enabled

    def test_disabled_gene_reenabled(self, config, rng):
        config.disabled_gene_inherit_prob = 0.0
        parent1 = make_genome(config, [(0, 0, 2, 1.0, False)])
        parent2 = make_genome(config, [(0, 0, 2, 1.0, False)])

        for _ in range(20):
            assert crossover(parent1, parent2, 1.0, 1.0, rng).conn_genes[0].enabled

    def test_enabled_in_both_stays_enabled(self, config, parent_a, parent_b, rng):
        config.disabled_gene_inherit_prob = 1.0
        assert crossover(parent_a, parent_b, 1.0, 1.0, rng).conn_genes[0].enabled


# ============================================================================
# Test: Disjoint and excess genes
# ============================================================================

class TestCrossoverExtraGenes:
    """Test the inheritance of disjoint and excess genes."""

    def test_from_fitter_first_parent(self, parent_a, parent_b, rng):
        child = crossover(parent_a, parent_b, 2.0, 1.0, rng)

        assert set(child.conn_genes) == {0, 1}
        assert child.hidden_nodes == []

    def test_from_fitter_second_parent(self, parent_a, parent_b, rng):
        child = crossover(parent_a, parent_b, 1.0, 2.0, rng)

        assert set(child.conn_genes) == {0, 2, 3}
        assert [n.id for n in child.hidden_nodes] == [3]

    def test_tie_first(self, config, parent_a, parent_b, rng):
        config.crossover_tie_policy = "first"
        for _ in range(10):
            assert set(crossover(parent_a, parent_b, 1.0, 1.0, rng).conn_genes) == {0, 1}

    def test_tie_random(self, config, parent_a, parent_b):
        config.crossover_tie_policy = "random"
        outcomes = {frozenset(crossover(parent_a, parent_b, 1.0, 1.0, random.Random(seed)).conn_genes)
                    for seed in range(30)}
        assert outcomes == {frozenset({0, 1}), frozenset({0, 2, 3})}

    def test_tie_random_is_reproducible(self, parent_a, parent_b):
        child1 = crossover(parent_a, parent_b, 1.0, 1.0, random.Random(7))
        child2 = crossover(parent_a, parent_b, 1.0, 1.0, random.Random(7))
        assert child1.to_dict() == child2.to_dict()

    def test_tie_mixed(self, config, parent_a, parent_b, rng):
        config.crossover_tie_policy = "mixed"
        child = crossover(parent_a, parent_b, 1.0, 1.0, rng)

        assert set(child.conn_genes) == {0, 1, 2, 3}
        assert [n.id for n in child.hidden_nodes] == [3]

    def test_tie_mixed_skips_cycle(self, config, cycle_parents, rng):
        config.crossover_tie_policy = "mixed"
        child = crossover(*cycle_parents, 1.0, 1.0, rng)

        assert set(child.conn_genes) == {0, 1, 2, 4}
        assert not child.has_cycle(enabled_only=False)

    def test_tie_mixed_keeps_cycle_when_recurrent(self, cycle_parents, rng):
        config = cycle_parents[0].config
        config.crossover_tie_policy = "mixed"
        config.allow_recurrent      = True

        child = crossover(*cycle_parents, 1.0, 1.0, rng)
        assert set(child.conn_genes) == {0, 1, 2, 3, 4}

    def test_tie_mixed_skips_duplicate_pair(self, config, rng):
        """The same connection numbered differently by the two parents is inherited once."""
        config.crossover_tie_policy = "mixed"
        parent1 = make_genome(config, [(0, 0, 2, 1.0)])
        parent2 = make_genome(config, [(5, 0, 2, 1.0)])

        child = crossover(parent1, parent2, 1.0, 1.0, rng)
        assert set(child.conn_genes) == {0}


# ============================================================================
# Test: Ownership
# ============================================================================

class TestCrossoverOwnership:
    """The child owns copies of the parents' genes."""

    def test_no_aliasing(self, config, parent_a, parent_b, rng):
        config.crossover_tie_policy = "mixed"
        child = crossover(parent_a, parent_b, 1.0, 1.0, rng)

        parent_genes = list(parent_a.conn_genes.values()) + list(parent_b.conn_genes.values())
        parent_nodes = list(parent_a.node_genes.values()) + list(parent_b.node_genes.values())
        for conn in child.conn_genes.values():
            assert all(conn is not gene for gene in parent_genes)
        for node in child.node_genes.values():
            assert all(node is not gene for gene in parent_nodes)

    def test_parents_unchanged(self, config, parent_a, parent_b, rng):
        config.matching_weight_policy = "average"
        before_a, before_b = parent_a.to_dict(), parent_b.to_dict()

        child = crossover(parent_a, parent_b, 1.0, 2.0, rng)
        child.conn_genes[0].weight = 10.0

        assert parent_a.to_dict() == before_a
        assert parent_b.to_dict() == before_b

    def test_child_shares_config_of_first_parent(self, parent_a, parent_b, rng):
        assert crossover(parent_a, parent_b, 1.0, 2.0, rng).config is parent_a.config

    def test_child_is_valid(self, config, cycle_parents, rng):
        """The child's plain-data form passes every structural check."""
        config.crossover_tie_policy = "mixed"
        child = crossover(*cycle_parents, 1.0, 1.0, rng)
        assert Genome.from_dict(child.to_dict(), Config()).to_dict() == child.to_dict()
