"""
Core algorithms for treegrab: filtering, tree assembly and traversal, and
the concurrent download orchestrator.
"""
