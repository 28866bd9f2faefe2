"""
Domain services for FactGraph.

- fact_parser: extracts entities and relations from fact text
- response_normalizer: reconciles backend payload shapes
- layout: force-directed node placement and type colors
- graph_explorer: filtered views and graph summaries
"""
