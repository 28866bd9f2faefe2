"""
Fact Text Parser for FactGraph.

Extracts entities, relations and citations from the fact notation embedded
in backend answers, in both the bullet and the grouped layouts.
"""

from .builder import GraphBuilder
from .grouped import GroupedFactsParser, parse_grouped_facts
from .parser import FactBlocks, FactTextParser, parse_retrieved_facts

__all__ = [
    "FactTextParser",
    "FactBlocks",
    "GroupedFactsParser",
    "GraphBuilder",
    "parse_retrieved_facts",
    "parse_grouped_facts",
]
