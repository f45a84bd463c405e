"""
Pytest fixtures for metabolite set tests.

Provides an in-memory KEGG client and KEGG flat file snippets.
"""
import pytest
from typing import Dict, List, Optional, Sequence

from metabolite_sets.model import MetaboliteRecord, PathwayRecord, PathwayRef


class FakeKeggClient:
    """In-memory stand-in for KeggClient that records every call."""

    def __init__(
        self,
        metabolites: Dict[str, MetaboliteRecord],
        pathways: Dict[str, PathwayRecord],
    ):
        self.metabolites = metabolites
        self.pathways = pathways
        self.metabolite_calls: List[List[str]] = []
        self.pathway_calls: List[str] = []

    def fetch_metabolite_records(self, ids: Sequence[str]) -> List[MetaboliteRecord]:
        ids = list(ids)
        self.metabolite_calls.append(ids)
        return [self.metabolites[i] for i in ids if i in self.metabolites]

    def fetch_pathway_record(self, code: str) -> Optional[PathwayRecord]:
        self.pathway_calls.append(code)
        return self.pathways.get(code)


def metabolite(entry, *codes):
    return MetaboliteRecord(entry=entry, name=entry, pathways=tuple(PathwayRef(c, f'name {c}') for c in codes))


def pathway(entry, *compounds, pathname=None):
    return PathwayRecord(entry=entry, pathname=pathname or f'name {entry}', compounds=tuple((c, f'cpd {c}') for c in compounds))


@pytest.fixture
def kegg():
    """
    Snapshot with:
    - map00260: serine + pyruvate measured (3 compounds in total)
    - map01100: global, no compound list
    - map02010: ABC transporters, on the default exclusion list
    - map00999: not defined for hsa
    - C00186 (lactate) in no pathway, C99999 unknown to KEGG
    """
    metabolites = {
        'C00065': metabolite('C00065', 'map00260', 'map01100', 'map02010', 'map00999'),
        'C00022': metabolite('C00022', 'map00260', 'map01100', 'map02010', 'map00620'),
        'C00037': metabolite('C00037', 'map01100', 'map02010', 'map00999'),
        'C00186': metabolite('C00186'),
    }
    pathways = {
        'hsa00260': pathway('hsa00260', 'C00065', 'C00022', 'C00041'),
        'hsa01100': pathway('hsa01100'),
        'hsa02010': pathway('hsa02010', 'C00065', 'C00022', 'C00037'),
        'hsa00620': pathway('hsa00620', 'C00022', 'C00024'),
    }
    return FakeKeggClient(metabolites, pathways)


COMPOUND_FLAT = """\
ENTRY       C00065                      Compound
NAME        L-Serine;
            L-2-Amino-3-hydroxypropionic acid
FORMULA     C3H7NO3
PATHWAY     map00260  Glycine, serine and threonine metabolism
            map00270  Cysteine and methionine metabolism
            map01100  Metabolic pathways
MODULE      M00020  Serine biosynthesis
///
ENTRY       C00186                      Compound
NAME        (S)-Lactate;
            L-Lactate
FORMULA     C3H6O3
///
"""

PATHWAY_FLAT = """\
ENTRY       hsa00260                    Pathway
NAME        Glycine, serine and threonine metabolism - Homo sapiens (human)
PATHWAY_MAP hsa00260  Glycine, serine and threonine metabolism
ORGANISM    Homo sapiens (human) [GN:hsa]
COMPOUND    C00022  Pyruvate
            C00065  L-Serine
            C00037  Glycine
REFERENCE   PMID:12345
  AUTHORS   Doe J
  TITLE     Serine
///
"""

GLOBAL_PATHWAY_FLAT = """\
ENTRY       hsa01100                    Pathway
NAME        Metabolic pathways - Homo sapiens (human)
PATHWAY_MAP hsa01100  Metabolic pathways
ORGANISM    Homo sapiens (human) [GN:hsa]
///
"""
