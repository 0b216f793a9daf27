"""Entrypoints (inbound adapters) for MARKETBASE.

Expose the application to the outside world: the CLI and the schema repair
trigger. Parse and validate inputs, call the bootstrap facades, and present
results.

Dependency rule: may import `marketbase.bootstrap` and
`marketbase.service_layer`; avoid importing `marketbase.adapters` directly.
"""
