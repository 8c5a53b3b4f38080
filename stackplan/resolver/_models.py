from stackplan.core import DataModel


class ResolvedConfiguration(DataModel):
    """Environment resolved for a service.

    Attributes:
        service: Service identifier.
        variables: Variable name to value, sorted by name.
    """

    service: str
    variables: dict[str, str] = {}

    def __getitem__(self, name: str) -> str:
        return self.variables[name]

    def __contains__(self, name: object) -> bool:
        return name in self.variables
