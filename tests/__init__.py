"""marketbase test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- contract/     : Record store and id generator behavior shared by every adapter.
- integration/  : Real SQLite files and PostgreSQL containers, migrations, startup.
- e2e/          : Single CLI commands through Click's runner.
- functional/   : Operator stories spanning several CLI commands.
- fixtures/     : Shared pytest plugins (engines, data factories); no tests here.

General guidance
- Keep unit fast and deterministic; service-layer tests use the in-memory store.
- PostgreSQL tests skip when Docker is not available.
- Suggested markers: unit, contract, integration, e2e, functional, slow
"""
