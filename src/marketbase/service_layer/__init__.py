"""Service layer for MARKETBASE.

Implements application use-cases: schema reconciliation, administrator
bootstrap, commission calculation, command handlers and transaction
boundaries. Calls domain objects and the ports defined in
`marketbase.interfaces`.

Dependency rule: may import `marketbase.domain` and `marketbase.interfaces`,
but not `marketbase.adapters` or `marketbase.entrypoints`.
"""
