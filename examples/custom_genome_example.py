"""
Example: Creating Custom Genomes from Dictionary Descriptions

This example demonstrates how to use the Genome.from_dict() class method
to programmatically create genomes with specific structures, and how to
continue evolving them with an innovation registry.
"""

import random

from neatcore.genotype  import Genome, InnovationRegistry
from neatcore.phenotype import NetworkFast
from neatcore.run       import Config

# Example 1: XOR-like network with two hidden nodes
print("="*60)
print("Example 1: XOR-like network")
print("="*60)

xor_network = {
    "nodes": [
        # Input nodes: must be numbered [0, num_inputs)
        {"id": 0, "type": "input"},
        {"id": 1, "type": "input"},

        # The bias node (optional) comes right after the inputs
        {"id": 2, "type": "bias"},

        # Output nodes come next
        {"id": 3, "type": "output"},

        # Hidden nodes: must be numbered after all the other nodes
        {"id": 4, "type": "hidden"},
        {"id": 5, "type": "hidden"}
    ],
    "connections": [
        {"from": 0, "to": 4, "weight":  5.0},
        {"from": 1, "to": 4, "weight":  5.0},
        {"from": 2, "to": 4, "weight": -2.5},
        {"from": 0, "to": 5, "weight":  5.0},
        {"from": 1, "to": 5, "weight":  5.0},
        {"from": 2, "to": 5, "weight": -7.5},
        {"from": 4, "to": 3, "weight": 10.0},
        {"from": 5, "to": 3, "weight": -10.0},
        {"from": 2, "to": 3, "weight": -5.0}
    ]
}

genome1 = Genome.from_dict(xor_network)
print(f"Created genome with:")
print(f"  - {len(genome1.input_nodes)} inputs")
print(f"  - {len(genome1.output_nodes)} outputs")
print(f"  - {len(genome1.hidden_nodes)} hidden nodes")
print(f"  - {len(genome1.conn_genes)} connections")
print(f"\n{genome1}\n")

for inputs in ([0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]):
    print(f"{inputs} -> {genome1.activate(inputs)[0]:.4f}")

# Example 2: Recurrent network (needs a configuration allowing recurrence)
print("="*60)
print("Example 2: Recurrent network")
print("="*60)

config = Config()
config.allow_recurrent = True
config.activation      = "tanh"

recurrent_network = {
    "nodes": [
        {"id": 0, "type": "input"},
        {"id": 1, "type": "output"},
        {"id": 2, "type": "hidden"}
    ],
    "connections": [
        {"from": 0, "to": 2, "weight":  1.0},
        {"from": 2, "to": 1, "weight":  1.0},
        {"from": 1, "to": 2, "weight": -0.5},   # closes the cycle 2 -> 1 -> 2
    ]
}

genome2 = Genome.from_dict(recurrent_network, config)
network = NetworkFast(genome2)
print(f"recurrent network: {network.is_recurrent}")
print(network.forward_pass([[0.0], [0.5], [1.0]]))

# Example 3: Evolving a restored genome
print("="*60)
print("Example 3: Evolving a restored genome")
print("="*60)

# The registry must know about the genome before it can mutate it,
# so that new structure never reuses the genome's identifiers
registry = InnovationRegistry.for_config(genome1.config)
registry.observe(genome1)

rng   = random.Random(0)
child = genome1.spawn_child(registry, rng)
Genome.show_aligned(genome1, child)
