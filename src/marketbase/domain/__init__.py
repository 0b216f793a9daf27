"""Domain layer for MARKETBASE.

Contains business rules: the expected marketplace collection graph, field
kinds, and the fixed-point money math used for commissions. This package is
deliberately technology-agnostic.

Dependency rule: do not import from `marketbase.adapters` or
`marketbase.entrypoints`.
"""
