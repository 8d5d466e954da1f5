"""
NEAT Connection Gene Module

This module implements the ConnectionGene class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    ConnectionGene: Gene encoding a weighted connection between nodes
"""

import random

class ConnectionGene:
    """
    A gene describing a weighted connection between two nodes in a Neural Network.

    Each connection gene represents a directed edge in the neural network graph,
    connecting a source node to a destination node with an associated weight.
    Connection genes are uniquely identified by their innovation number, which
    serves as a historical marker enabling proper gene alignment during crossover.

    Connections are never deleted: they are disabled, which preserves the structural
    information needed to align genes while deactivating the pathway. Disabled
    connections may be re-enabled through mutation.

    Public Attributes:
        node_in:    ID of the source node
        node_out:   ID of the destination node
        weight:     Weight of the connection
        enabled:    Whether this connection is active in the network
        recurrent:  Whether this connection closed a cycle when it was created
        innovation: Global innovation number uniquely identifying this connection

    Public Methods:
        mutate(): Stochastically mutate the connection weight
    """

    __slots__ = ("node_in", "node_out", "weight", "enabled", "recurrent", "innovation")

    def __init__(self,
                 node_in   : int,
                 node_out  : int,
                 weight    : float,
                 innovation: int,
                 enabled   : bool = True,
                 recurrent : bool = False):
        """
        Initialize a connection gene.

        Parameters:
            node_in:    ID of the source node
            node_out:   ID of the destination node
            weight:     Weight of the connection
            innovation: Number uniquely and globally identifying this connection
            enabled:    Whether this connection is active in the network
            recurrent:  Whether this connection closed a cycle when it was created
        """
        self.node_in   : int   = node_in
        self.node_out  : int   = node_out
        self.weight    : float = float(weight)
        self.enabled   : bool  = enabled
        self.recurrent : bool  = recurrent
        self.innovation: int   = innovation

    @property
    def key(self) -> tuple[int, int]:
        """The (source, target) pair of this connection."""
        return (self.node_in, self.node_out)

    def mutate(self,
               rate        : float,
               power       : float,
               replace_prob: float,
               min_weight  : float,
               max_weight  : float,
               rng=None) -> None:
        """
        Stochastically mutate the (gene describing the) connection.

        Both whether a mutation occurs and its nature & magnitude are stochastic.
        For a connection gene, mutating means changing the 'weight' parameter.
        Mutating a parameter can be accomplished in two ways:
         + with probability 'rate', modifying the current value by a bounded amount
         + otherwise, with probability 'replace_prob', replacing the current value by a new one

        Parameters:
            rate:         probability of perturbing the weight
            power:        bound of the uniform perturbation
            replace_prob: probability of replacing a weight which was not perturbed
            min_weight:   smallest allowed weight
            max_weight:   largest allowed weight
            rng:          source of randomness (the 'random' module if not specified)
        """
        rng = rng if rng is not None else random

        if rng.random() < rate:
            new_weight  = self.weight + rng.uniform(-power, power)
            self.weight = max(min_weight, min(max_weight, new_weight))   # Clip it

        elif rng.random() < replace_prob:
            self.weight = rng.uniform(min_weight, max_weight)

    def __eq__(self, other):
        if not isinstance(other, ConnectionGene):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__slots__)

    def __hash__(self):
        return hash((self.innovation, self.node_in, self.node_out))

    def __repr__(self):
        return (f"ConnectionGene(node_in={self.node_in:03d}, node_out={self.node_out:03d}, "
                f"weight={self.weight:+.6f}, enabled={self.enabled}, recurrent={self.recurrent}, "
                f"innovation={self.innovation:03d})")

    def __str__(self):
        s  = f"[{self.innovation:03d},{'E' if self.enabled else 'D'}{'R' if self.recurrent else ''},"
        s += f"{self.node_in:02d}=>{self.node_out:02d},{self.weight:+.02f}]"
        return s
