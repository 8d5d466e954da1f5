"""
Unit tests for the parallel helpers: fitness evaluation and mutation over a population.
"""

import random
from functools import partial

import pytest

from neatcore.genotype.genome import Genome
from neatcore.genotype.innovation_registry import InnovationRegistry
from neatcore.phenotype import activate
from neatcore.pool.parallel import evaluate_fitness_all, mutate_all


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def busy_config(config):
    """Fully connected initial genomes and frequent structural mutations."""
    config.initial_cxn_policy            = "full"
    config.node_add_probability          = 0.3
    config.connection_add_probability    = 0.3
    config.connection_toggle_probability = 0.1
    return config


def build_population(config, size=20, seed=0):
    registry = InnovationRegistry.for_config(config)
    rng      = random.Random(seed)
    genomes  = [Genome.create(2, 1, False, config, registry, rng) for _ in range(size)]
    return genomes, registry


def check_consistency(genomes, registry):
    """Every genome is well formed, and every gene agrees with the registry."""
    for genome in genomes:
        pairs = [conn.key for conn in genome.conn_genes.values()]
        assert len(pairs) == len(set(pairs))
        for innov, conn in genome.conn_genes.items():
            assert conn.innovation == innov
            assert conn.node_in in genome.node_genes and conn.node_out in genome.node_genes
            assert registry.get_innovation_number(conn.node_in, conn.node_out) == innov
        assert not genome.has_cycle(enabled_only=False)
        assert max(genome.node_genes) < registry.next_node_id


# ============================================================================
# Test: evaluate_fitness_all
# ============================================================================

class TestEvaluateFitnessAll:
    """Test serial and parallel fitness evaluation."""

    def test_serial(self, busy_config):
        genomes, _ = build_population(busy_config, size=5)
        fitnesses  = evaluate_fitness_all(genomes, lambda genome: float(len(genome.conn_genes)))
        assert fitnesses == [2.0] * 5

    def test_parallel_matches_serial(self, busy_config):
        genomes, registry = build_population(busy_config, size=8)
        mutate_all(genomes, registry, rng_seed=3)
        fitness_fn = partial(activate, inputs=[0.25, 0.75])

        serial   = evaluate_fitness_all(genomes, fitness_fn)
        parallel = evaluate_fitness_all(genomes, fitness_fn, num_jobs=2)

        assert parallel == serial

    def test_keeps_order(self, config):
        genomes = [Genome(config) for _ in range(6)]
        for i, genome in enumerate(genomes):
            genome.tag = i
        assert evaluate_fitness_all(genomes, lambda genome: genome.tag) == list(range(6))

    def test_empty_population(self):
        assert evaluate_fitness_all([], len) == []


# ============================================================================
# Test: mutate_all
# ============================================================================

class TestMutateAll:
    """Test serial and threaded mutation."""

    def test_seeded_mutation_is_reproducible(self, busy_config):
        genomes1, registry1 = build_population(busy_config)
        genomes2, registry2 = build_population(busy_config)

        for generation in range(5):
            mutate_all(genomes1, registry1, rng_seed=generation)
            mutate_all(genomes2, registry2, rng_seed=generation)

        assert [g.to_dict() for g in genomes1] == [g.to_dict() for g in genomes2]
        assert registry1.next_innovation == registry2.next_innovation

    def test_serial_mutation_keeps_invariants(self, busy_config):
        genomes, registry = build_population(busy_config)
        for generation in range(10):
            mutate_all(genomes, registry, rng_seed=generation)

        check_consistency(genomes, registry)
        assert any(genome.hidden_nodes for genome in genomes)

    def test_threaded_mutation_keeps_invariants(self, busy_config):
        genomes, registry = build_population(busy_config, size=40)
        for generation in range(10):
            mutate_all(genomes, registry, num_jobs=4, rng_seed=generation)

        check_consistency(genomes, registry)

    def test_threaded_splits_agree(self, busy_config):
        """Genomes splitting the same connection concurrently get the same new node."""
        busy_config.node_add_probability       = 1.0
        busy_config.connection_add_probability = 0.0
        genomes, registry = build_population(busy_config, size=40)

        mutate_all(genomes, registry, num_jobs=8, rng_seed=11)

        split_nodes = {}
        for genome in genomes:
            for conn in genome.conn_genes.values():
                if genome.node_genes[conn.node_out].type.name == "HIDDEN":
                    split_nodes.setdefault(conn.node_in, set()).add(conn.node_out)
        # Only two connections (0 -> 2 and 1 -> 2) can be split in the first generation
        assert sum(len(nodes) for nodes in split_nodes.values()) <= 2
        check_consistency(genomes, registry)
