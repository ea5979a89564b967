"""Mobile mesh network simulation: data dissemination, mobility, group tracking and a blockgraph model."""

__version__ = "0.1.0"