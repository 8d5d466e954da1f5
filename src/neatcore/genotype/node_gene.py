"""
NEAT Node Gene Module.

This module implements the NodeGene class and NodeType enumeration
for the NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    NodeType: Enumeration for node types (INPUT, BIAS, HIDDEN, OUTPUT)
    NodeGene: Gene encoding a single network node
"""

from enum import Enum

class NodeType(Enum):
    """
    Nodes come in four types: input, bias, hidden, output.
    A bias node is an input-like node that always emits 1.0.
    """
    INPUT  = "I"
    BIAS   = "B"
    HIDDEN = "H"
    OUTPUT = "O"

    @property
    def is_source(self) -> bool:
        """Whether the node only emits a value (it cannot be the end of a connection)."""
        return self in (NodeType.INPUT, NodeType.BIAS)

class NodeGene:
    """
    A gene describing a node in a Neural Network.

    Node genes are identified by a node ID which is unique within a genome and which
    remains consistent across structural mutations and crossover operations: the same
    split of the same connection produces the same node ID in every genome.

    Nodes are never individually destroyed once created; a node is taken out of
    the network by disabling the connections which reach it.

    Public Attributes:
        id:       Identifier for this node
        type:     Type of node (INPUT, BIAS, HIDDEN or OUTPUT)
        split_of: Innovation number of the connection whose split created this node
                  (None for input, bias and output nodes, and for hidden nodes of unknown origin)
    """

    __slots__ = ("id", "type", "split_of")

    def __init__(self, node_id: int, node_type: NodeType, split_of: int | None = None):
        """
        Initialize a node gene.

        Parameters:
            node_id:   Identifier for this node
            node_type: Type of node (INPUT, BIAS, HIDDEN or OUTPUT)
            split_of:  Innovation number of the split connection, for hidden nodes
        """
        self.id      : int        = node_id
        self.type    : NodeType   = node_type
        self.split_of: int | None = split_of

    def __eq__(self, other):
        if not isinstance(other, NodeGene):
            return NotImplemented
        return self.id == other.id and self.type == other.type

    def __hash__(self):
        return hash((self.id, self.type))

    def __repr__(self):
        if self.split_of is None:
            return f"NodeGene(node_id={self.id}, node_type=NodeType.{self.type.name})"
        return f"NodeGene(node_id={self.id}, node_type=NodeType.{self.type.name}, split_of={self.split_of})"

    def __str__(self):
        return f"[{self.type.value}{self.id}]"
