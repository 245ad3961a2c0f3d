"""
Modifier composition graph.

  graph/modifiers.py: ModifierGraph: load, validate (edges, acyclicity), look up.
  graph/closure.py  : ClosureEngine: memoized recipe closure and tier.
"""
