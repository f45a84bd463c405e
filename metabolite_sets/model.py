import re
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from metabolite_sets.config import GENERIC_PREFIX

_organism_prefix = re.compile(r'^[A-Za-z]+')

def generic_to_organism(code: str, organism: str) -> str:
    """Rewrite a generic pathway code into an organism namespace.

    This is a plain prefix replacement (``map00260`` -> ``hsa00260``), not a
    lookup; whether the result exists is checked against KEGG separately.
    Codes not starting with the generic prefix are returned unchanged.
    """
    if code.startswith(GENERIC_PREFIX):
        return organism + code[len(GENERIC_PREFIX):]
    return code

def strip_organism_prefix(code: str) -> str:
    return _organism_prefix.sub('', code)

@dataclass(frozen=True)
class PathwayRef:
    code: str
    name: str = None

@dataclass(frozen=True)
class MetaboliteRecord:
    entry: str
    name: str = None
    pathways: Tuple[PathwayRef, ...] = ()

@dataclass(frozen=True)
class PathwayRecord:
    entry: str
    pathname: str = None
    compounds: Tuple[Tuple[str, str], ...] = ()

    @property
    def compound_ids(self) -> Tuple[str, ...]:
        return tuple(c for c, _ in self.compounds)

@dataclass
class MetaboliteSets:
    filtered_pathways: List[PathwayRecord]
    metabolite_set: Dict[str, Set[str]]
    counts: Dict[str, int] = field(default_factory=dict)
    pathway_names: Dict[str, str] = field(default_factory=dict)

    def pathway_ids(self) -> List[str]:
        """Bare pathway numbers (``hsa00260`` -> ``00260``) as taken by diagram renderers."""
        return [strip_organism_prefix(code) for code in self.metabolite_set]
