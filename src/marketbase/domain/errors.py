"""Domain-layer error definitions."""

# ============================================================================
#                           General domain errors
# ============================================================================


class DomainError(Exception):
    """Base class for domain-layer errors."""


# ============================================================================
#                           Schema graph errors
# ============================================================================


class UnknownCollectionError(DomainError):
    """Raised when a collection name is not part of the expected schema graph."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection '{name}' is not part of the marketplace schema.")
        self.name = name


class DependencyCycleError(DomainError):
    """Raised when relation fields form a cycle between managed collections."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(
            f"Relation cycle between collections: {', '.join(sorted(names))}"
        )
        self.names = names


# ============================================================================
#                           Money errors
# ============================================================================


class InvalidAmountError(DomainError):
    """Raised when a monetary value or a rate cannot be read as a decimal."""

    def __init__(self, field_name: str, value: object) -> None:
        super().__init__(f"Field '{field_name}' is not a valid number: {value!r}")
        self.field_name = field_name
        self.value = value
