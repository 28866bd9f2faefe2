"""Shared fixtures for FactGraph tests."""

import pytest

from factgraph.shared import CanonicalGraph, KGEdge, KGNode, get_settings

SPEC_EXAMPLE = (
    'Retrieved Facts: • (service:"risk mgmt") -[ADDRESSES]-> (risk:"fraud") [1]\n'
    'Sources:\n'
    '[1] https://a.com'
)

ANSWER_WITH_FACTS = (
    "Diagnostics: retrieved 3 facts in 12ms\n"
    "Chat Response: Fraud is handled by the risk team.\n"
    "Retrieved Facts: • (service:\"risk mgmt\" url=https://risk.example.com) -[ADDRESSES]-> (risk:\"fraud\") [1][2]"
    " • (team:\"risk team\") -[OWNS]-> (service:\"risk mgmt\" page:\"4\") [2]"
    " • not a fact at all\n"
    "Sources: [1] https://a.com [2] https://b.com"
)

GROUPED_LINES = [
    '(organization:"usi") [3]',
    '-[PROVIDES]-> (service:"benefits consulting") [3]',
    '<-[PARTNERS_WITH]- (organization:"acme") [4]',
]


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are re-read for every test so environment patches apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_graph():
    """
    Four nodes, three edges and one isolate.

    Degrees: risk mgmt 2, fraud 2, theft 2, ledger 0.
    """
    nodes = [
        KGNode(type="service", label="risk mgmt", url="https://risk.example.com"),
        KGNode(type="risk", label="fraud"),
        KGNode(type="risk", label="theft"),
        KGNode(type="tool", label="ledger"),
    ]
    edges = [
        KGEdge(id="e_0", source_id="service:risk mgmt", target_id="risk:fraud",
               relation_label="USES", citation_indices=[1, 2]),
        KGEdge(id="e_1", source_id="service:risk mgmt", target_id="risk:theft",
               relation_label="MITIGATES", citation_indices=[3]),
        KGEdge(id="e_2", source_id="risk:fraud", target_id="risk:theft",
               relation_label="RELATES", citation_indices=[2, 4, 5]),
    ]
    return CanonicalGraph(
        nodes=nodes,
        edges=edges,
        source_index_to_url={1: "https://a.com", 2: "https://b.com", 4: "https://d.com"},
        tenant="acme",
    )
