"""
Unit tests for InnovationRegistry class.

Tests cover initialization, innovation number assignment, connection splits,
observing existing genomes, conflict detection and concurrent access.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from neatcore.errors import RegistryConflict
from neatcore.genotype.connection_gene import ConnectionGene
from neatcore.genotype.genome import Genome
from neatcore.genotype.innovation_registry import (ConnectionInnovation,
                                                   InnovationRegistry,
                                                   SplitInnovation,
                                                   SplitRecord)
from neatcore.run.config import Config


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def basic_config():
    """Config with 3 inputs and 2 outputs."""
    config = Mock(spec=Config)
    config.num_inputs = 3
    config.num_outputs = 2
    config.first_hidden_id = 5
    return config


@pytest.fixture
def basic_registry(basic_config):
    return InnovationRegistry.for_config(basic_config)


# ============================================================================
# Test: Initialization
# ============================================================================

class TestInnovationRegistryInit:
    """Test InnovationRegistry initialization."""

    def test_for_config_uses_first_hidden_id(self, basic_registry):
        """The first split node comes right after the fixed nodes."""
        assert basic_registry.next_node_id == 5
        assert basic_registry.next_innovation == 0
        assert len(basic_registry) == 0

    def test_custom_first_innovation(self):
        """Innovation numbers can start from a custom value."""
        registry = InnovationRegistry(first_node_id=3, first_innovation=100)
        assert registry.get_innovation_number(0, 2) == 100

    def test_registries_are_independent(self):
        """Two registries never share state."""
        registry1 = InnovationRegistry(first_node_id=3)
        registry2 = InnovationRegistry(first_node_id=3)

        registry1.get_innovation_number(0, 2)
        registry1.get_innovation_number(1, 2)

        assert registry2.get_innovation_number(1, 2) == 0


# ============================================================================
# Test: Connection Innovations
# ============================================================================

class TestConnectionInnovations:
    """Test innovation numbers assigned to new connections."""

    def test_sequential_numbers(self, basic_registry):
        """New connections get sequential innovation numbers."""
        assert basic_registry.get_innovation_number(0, 3) == 0
        assert basic_registry.get_innovation_number(1, 3) == 1
        assert basic_registry.get_innovation_number(2, 4) == 2
        assert basic_registry.next_innovation == 3

    def test_same_connection_same_number(self, basic_registry):
        """The same connection always gets the same innovation number."""
        innov = basic_registry.get_innovation_number(0, 3)
        basic_registry.get_innovation_number(1, 3)

        assert basic_registry.get_innovation_number(0, 3) == innov
        assert basic_registry.next_innovation == 2

    def test_direction_matters(self, basic_registry):
        """Connections A -> B and B -> A are different innovations."""
        innov1 = basic_registry.get_innovation_number(5, 6)
        innov2 = basic_registry.get_innovation_number(6, 5)
        assert innov1 != innov2

    def test_get_or_assign_with_descriptor(self, basic_registry):
        """get_or_assign accepts connection descriptors."""
        innov = basic_registry.get_or_assign(ConnectionInnovation(0, 3))
        assert innov == basic_registry.get_innovation_number(0, 3)

    def test_get_or_assign_rejects_unknown_descriptor(self, basic_registry):
        """Plain tuples are not descriptors."""
        with pytest.raises(TypeError):
            basic_registry.get_or_assign((0, 3))


# ============================================================================
# Test: Split Innovations
# ============================================================================

class TestSplitInnovations:
    """Test identifiers assigned to connection splits."""

    def test_split_assigns_node_and_two_connections(self, basic_registry):
        """A split gets a new node ID and two new innovation numbers."""
        innov = basic_registry.get_innovation_number(0, 3)
        conn  = ConnectionGene(0, 3, 1.0, innov)

        record = basic_registry.get_split_ids(conn)

        assert record == SplitRecord(node_id=5, innovation_in=1, innovation_out=2)
        assert basic_registry.next_node_id == 6
        assert basic_registry.next_innovation == 3

    def test_same_split_same_ids(self, basic_registry):
        """Splitting the same connection twice gives the same identifiers."""
        innov = basic_registry.get_innovation_number(0, 3)
        conn  = ConnectionGene(0, 3, 1.0, innov)

        record1 = basic_registry.get_split_ids(conn)
        record2 = basic_registry.get_split_ids(ConnectionGene(0, 3, -2.0, innov))

        assert record1 == record2
        assert basic_registry.next_node_id == 6

    def test_split_connections_are_registered(self, basic_registry):
        """The two new connections are registered like any other connection."""
        innov  = basic_registry.get_innovation_number(0, 3)
        record = basic_registry.get_split_ids(ConnectionGene(0, 3, 1.0, innov))

        assert basic_registry.get_innovation_number(0, record.node_id) == record.innovation_in
        assert basic_registry.get_innovation_number(record.node_id, 3) == record.innovation_out

    def test_different_splits_different_nodes(self, basic_registry):
        """Different connections give different nodes when split."""
        innov1 = basic_registry.get_innovation_number(0, 3)
        innov2 = basic_registry.get_innovation_number(1, 3)

        record1 = basic_registry.get_split_ids(ConnectionGene(0, 3, 1.0, innov1))
        record2 = basic_registry.get_split_ids(ConnectionGene(1, 3, 1.0, innov2))

        assert record1.node_id != record2.node_id
        assert len({record1.innovation_in, record1.innovation_out,
                    record2.innovation_in, record2.innovation_out}) == 4

    def test_split_of_unregistered_connection(self, basic_registry):
        """Splitting a connection unknown to the registry registers it first."""
        record = basic_registry.get_or_assign(SplitInnovation(7, 0, 3))

        assert basic_registry.get_innovation_number(0, 3) == 7
        assert record == SplitRecord(node_id=5, innovation_in=8, innovation_out=9)

    def test_split_with_wrong_endpoints_conflicts(self, basic_registry):
        """A split descriptor contradicting the registry is a conflict."""
        innov = basic_registry.get_innovation_number(0, 3)

        with pytest.raises(RegistryConflict):
            basic_registry.get_or_assign(SplitInnovation(innov, 1, 3))

    def test_split_with_wrong_innovation_conflicts(self, basic_registry):
        """A connection registered under another innovation number is a conflict."""
        basic_registry.get_innovation_number(0, 3)

        with pytest.raises(RegistryConflict):
            basic_registry.get_or_assign(SplitInnovation(4, 0, 3))


# ============================================================================
# Test: Observe
# ============================================================================

class TestObserve:
    """Test folding existing genomes into the registry."""

    def test_observe_advances_counters(self):
        """Counters move past the identifiers found in the genome."""
        genome = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"},
                      {"id": 1, "type": "input"},
                      {"id": 2, "type": "output"},
                      {"id": 7, "type": "hidden"}],
            "connections": [{"innovation": 10, "from": 0, "to": 7, "weight": 1.0},
                            {"innovation": 11, "from": 7, "to": 2, "weight": 1.0}]
        })
        registry = InnovationRegistry(first_node_id=3)

        registry.observe(genome)

        assert registry.next_innovation == 12
        assert registry.next_node_id == 8
        assert registry.get_innovation_number(0, 7) == 10
        assert registry.get_innovation_number(1, 2) == 12

    def test_observe_is_idempotent(self):
        """Observing the same genome twice changes nothing the second time."""
        genome = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"}, {"id": 1, "type": "output"}],
            "connections": [{"innovation": 0, "from": 0, "to": 1, "weight": 1.0}]
        })
        registry = InnovationRegistry(first_node_id=2)

        registry.observe(genome)
        registry.observe(genome)

        assert registry.next_innovation == 1
        assert len(registry) == 1

    def test_observe_conflicting_genome(self):
        """A genome numbering a known connection differently is a conflict."""
        registry = InnovationRegistry(first_node_id=2)
        registry.get_innovation_number(0, 1)

        genome = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"}, {"id": 1, "type": "output"}],
            "connections": [{"innovation": 5, "from": 0, "to": 1, "weight": 1.0}]
        })
        with pytest.raises(RegistryConflict):
            registry.observe(genome)

    def test_observe_reused_innovation(self):
        """A genome reusing a known innovation number for another connection is a conflict."""
        registry = InnovationRegistry(first_node_id=3)
        registry.get_innovation_number(0, 2)   # innovation 0

        genome = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"}, {"id": 1, "type": "input"}, {"id": 2, "type": "output"}],
            "connections": [{"innovation": 0, "from": 1, "to": 2, "weight": 1.0}]
        })
        with pytest.raises(RegistryConflict):
            registry.observe(genome)

    def test_observe_restores_splits(self, config, registry):
        """After a save and restore, splitting the same connection again yields the same genes."""
        config.initial_cxn_policy = "full"
        genome_a = Genome.create(2, 1, False, config, registry)
        genome_b = genome_a.clone()
        new_node = genome_a.add_node(genome_a.conn_genes[0], registry)
        assert new_node.split_of == 0

        restored_a = Genome.from_dict(genome_a.to_dict(), config)
        restored_b = Genome.from_dict(genome_b.to_dict(), config)
        new_registry = InnovationRegistry.for_config(config)
        new_registry.observe(restored_a)
        new_registry.observe(restored_b)

        node = restored_b.add_node(restored_b.conn_genes[0], new_registry)
        assert node.id == new_node.id
        assert set(restored_b.conn_genes) == set(genome_a.conn_genes)
        assert new_registry.get_split_ids(restored_b.conn_genes[0]) == registry.get_split_ids(genome_a.conn_genes[0])

    def test_observe_conflicting_split(self):
        """A genome crediting a known split with another node is a conflict."""
        registry = InnovationRegistry(first_node_id=2)
        registry.get_innovation_number(0, 1)
        registry.get_split_ids(ConnectionGene(0, 1, 1.0, 0))   # node 2

        genome = Genome.from_dict({
            "nodes": [{"id": 0, "type": "input"}, {"id": 1, "type": "output"},
                      {"id": 5, "type": "hidden", "split": 0}],
            "connections": [{"innovation": 0, "from": 0, "to": 1, "weight": 1.0, "enabled": False},
                            {"innovation": 7, "from": 0, "to": 5, "weight": 1.0},
                            {"innovation": 8, "from": 5, "to": 1, "weight": 1.0}]
        })
        with pytest.raises(RegistryConflict):
            registry.observe(genome)


# ============================================================================
# Test: Concurrency
# ============================================================================

class TestConcurrency:
    """Test the registry under concurrent access."""

    NUM_WORKERS = 16

    def test_concurrent_same_descriptor(self, basic_registry):
        """Concurrent requests for one descriptor all get the same single new ID."""
        basic_registry.get_innovation_number(0, 3)
        next_before = basic_registry.next_innovation
        barrier     = threading.Barrier(self.NUM_WORKERS)

        def worker(_):
            barrier.wait()
            return basic_registry.get_or_assign(ConnectionInnovation(1, 4))

        with ThreadPoolExecutor(max_workers=self.NUM_WORKERS) as executor:
            results = list(executor.map(worker, range(self.NUM_WORKERS)))

        assert set(results) == {next_before}
        assert basic_registry.next_innovation == next_before + 1

    def test_concurrent_different_descriptors(self, basic_registry):
        """Concurrent requests for different descriptors never share an ID."""
        pairs   = [(i, 1000 + i) for i in range(200)]
        barrier = threading.Barrier(self.NUM_WORKERS)

        def worker(chunk):
            barrier.wait()
            return [basic_registry.get_innovation_number(*pair) for pair in chunk]

        chunks = [pairs[i::self.NUM_WORKERS] for i in range(self.NUM_WORKERS)]
        with ThreadPoolExecutor(max_workers=self.NUM_WORKERS) as executor:
            results = [innov for chunk in executor.map(worker, chunks) for innov in chunk]

        assert sorted(results) == list(range(len(pairs)))
        assert basic_registry.next_innovation == len(pairs)

    def test_concurrent_same_split(self, basic_registry):
        """Concurrent splits of one connection create a single node."""
        innov   = basic_registry.get_innovation_number(0, 3)
        conn    = ConnectionGene(0, 3, 1.0, innov)
        barrier = threading.Barrier(self.NUM_WORKERS)

        def worker(_):
            barrier.wait()
            return basic_registry.get_split_ids(conn)

        with ThreadPoolExecutor(max_workers=self.NUM_WORKERS) as executor:
            results = list(executor.map(worker, range(self.NUM_WORKERS)))

        assert len(set(results)) == 1
        assert basic_registry.next_node_id == 6
