class MigrationError(Exception):
    """Base error for the legacy-to-current pipeline."""


class ConfigurationError(MigrationError):
    pass


class TransformationError(MigrationError):
    """A legacy row could not be mapped onto the target schema."""

    def __init__(self, entity: str, key: str | None, message: str):
        self.entity = entity
        self.key = key
        self.message = message
        super().__init__(f"{entity} {key or '<unknown>'}: {message}")


class CohortNotFoundError(MigrationError):
    def __init__(self, cohort_id: str):
        self.cohort_id = cohort_id
        super().__init__(f"Cohort '{cohort_id}' does not exist")
