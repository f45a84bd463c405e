class MetaboliteSetError(Exception):
    pass


class InvalidInputError(MetaboliteSetError, ValueError):
    """Metabolites were not given as a flat sequence of identifiers."""


class RemoteFetchError(MetaboliteSetError):
    """A KEGG request failed for a reason other than a missing entry."""


class PathwayNotFound(MetaboliteSetError, LookupError):
    """KEGG has no record for a pathway code, e.g. not defined for the organism."""

    def __init__(self, code: str):
        super().__init__(f'Pathway "{code}" not found in KEGG')
        self.code = code
