"""
Test suite for the hydration engine.

Focus areas:
- Route codec round-trip and legacy redirects
- Planner purity and re-request suppression
- Fan-in joins under arbitrary completion order
- Stale response discard
- Replay determinism
"""
