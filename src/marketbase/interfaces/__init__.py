"""Interfaces (application boundary) for MARKETBASE.

Defines framework-free application contracts: the record store port, the unit
of work, ID generators, and the small DTOs shared by the service layer and
adapters. Business rules stay out of this package.

Dependency rule: may import `marketbase.domain`. It may be imported by
`marketbase.service_layer`, `marketbase.adapters`, and `marketbase.bootstrap`.
"""
