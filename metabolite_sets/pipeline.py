"""Build KEGG metabolite sets from a list of measured compounds.

Order of stages, each usable on its own::

    records = client.fetch_metabolite_records(metabolites)
    counts = count_metabolites_per_pathway(records)
    keep = filter_pathways(counts, threshold, organism, client)
    filtered = apply_manual_exclusions(keep)
    metabolite_set = trim_to_measured(filtered, metabolites)

Counting happens on generic ``map`` codes; existence checks and exclusions
happen on organism codes (``hsa``, ``mmu``, ...).
"""
import logging
import re
from collections.abc import Mapping
from typing import AbstractSet, Dict, Iterable, List, Sequence, Set, Tuple

from tqdm import tqdm

from metabolite_sets.config import DEFAULT_ORGANISM, DEFAULT_THRESHOLD, EXCLUDED_PATHWAYS
from metabolite_sets.errors import InvalidInputError
from metabolite_sets.kegg import KeggClient, KnowledgeBaseClient
from metabolite_sets.model import (
    MetaboliteRecord,
    MetaboliteSets,
    PathwayRecord,
    generic_to_organism,
)

logger = logging.getLogger(__name__)

# KEGG "get" URLs separate entries with + and path parts with /.
_identifier = re.compile(r'[^\s+/]+')


def validate_metabolites(metabolites) -> List[str]:
    if isinstance(metabolites, (str, bytes, Mapping)):
        raise InvalidInputError(f'Metabolites must be a sequence of KEGG identifiers, got {type(metabolites).__name__}')
    try:
        items = list(metabolites)
    except TypeError as e:
        raise InvalidInputError(f'Metabolites must be a sequence of KEGG identifiers, got {type(metabolites).__name__}') from e
    for m in items:
        if not isinstance(m, str):
            raise InvalidInputError(f'Metabolite identifiers must be strings, got {m!r}')
        if not _identifier.fullmatch(m):
            raise InvalidInputError(f'Invalid KEGG identifier {m!r}')
    return items


def dedupe(metabolites: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(metabolites))


def count_metabolites_per_pathway(records: Iterable[MetaboliteRecord]) -> Dict[str, int]:
    """Number of distinct measured metabolites in each generic pathway, ordered by code."""
    pathways = {}
    for record in records:
        for p in record.pathways:
            if p.code in pathways:
                pathways[p.code].add(record.entry)
            else:
                pathways[p.code] = {record.entry}
    return {code: len(pathways[code]) for code in sorted(pathways)}


def pathway_names(records: Iterable[MetaboliteRecord]) -> Dict[str, str]:
    return {p.code: p.name for record in records for p in record.pathways}


def filter_pathways(
    counts: Dict[str, int],
    threshold: int,
    organism: str,
    client: KnowledgeBaseClient,
    progress: bool = False,
) -> Dict[str, PathwayRecord]:
    """Keep pathways with at least ``threshold`` metabolites that exist for ``organism``.

    Returns organism pathway code -> full pathway record. Pathways KEGG does
    not define for the organism are dropped silently.
    """
    selected = [code for code, n in counts.items() if n >= threshold]
    logger.info(f'{len(selected)} pathways contain at least {threshold} metabolites.')

    keep = {}
    for code in tqdm(selected, desc='Checking pathways', disable=not progress):
        org_code = generic_to_organism(code, organism)
        record = client.fetch_pathway_record(org_code)
        if record is None:
            logger.debug(f'{org_code} does not exist for {organism}, dropped.')
            continue
        keep[org_code] = record
    return keep


def apply_manual_exclusions(
    records: Dict[str, PathwayRecord],
    excluded: AbstractSet[str] = EXCLUDED_PATHWAYS,
) -> List[PathwayRecord]:
    """Drop global pathways (no compound list) and pathways listed in ``excluded``."""
    filtered = []
    for record in records.values():
        if not record.compounds:
            logger.debug(f'{record.entry} ({record.pathname}) is a global pathway, dropped.')
            continue
        if record.entry in excluded:
            logger.debug(f'{record.entry} ({record.pathname}) is excluded, dropped.')
            continue
        filtered.append(record)
    logger.info(f'{len(filtered)} paths remaining after thresholding and manual filtering.')
    return filtered


def trim_to_measured(filtered: Sequence[PathwayRecord], measured: Iterable[str]) -> Dict[str, Set[str]]:
    measured = set(measured)
    return {p.entry: {c for c in p.compound_ids if c in measured} for p in filtered}


def trim_to_measured_named(filtered: Sequence[PathwayRecord], measured: Iterable[str]) -> Dict[str, List[Tuple[str, str]]]:
    """Like :func:`trim_to_measured` but keeps compound names and pathway order of compounds."""
    measured = set(measured)
    return {p.entry: [(c, name) for c, name in p.compounds if c in measured] for p in filtered}


def summarize_counts(counts: Dict[str, int], names: Dict[str, str] = None, top: int = 10) -> str:
    """Text summary of the metabolites-per-pathway distribution."""
    if not counts:
        return 'No pathways found.'
    names = names or {}
    lines = ['Top pathways:']
    ranked = sorted(counts, key=lambda k: counts[k], reverse=True)
    for i, code in enumerate(ranked[:top]):
        label = f'{names[code]} ({code})' if names.get(code) else code
        lines.append(f'  {i+1} {label}: {counts[code]}')

    most = counts[ranked[0]]
    lg = lambda k: len([c for c in counts.values() if c > most * k])
    lgstr = lambda k: f'>{most*k:.0f} ({k*100:.0f}%): {lg(k)}'
    lines.append('')
    lines.append('Statistics:')
    lines.append('  ' + ', '.join(lgstr(k / 10) for k in range(1, 10)))
    return '\n'.join(lines)


def build_metabolite_sets(
    metabolites: Sequence[str],
    threshold: int = DEFAULT_THRESHOLD,
    organism: str = DEFAULT_ORGANISM,
    client: KnowledgeBaseClient = None,
    excluded: AbstractSet[str] = EXCLUDED_PATHWAYS,
    progress: bool = False,
) -> MetaboliteSets:
    metabolites = validate_metabolites(metabolites)
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 1:
        raise InvalidInputError(f'Threshold must be a positive integer, got {threshold!r}')
    if not isinstance(organism, str) or not organism:
        raise InvalidInputError(f'Organism must be a KEGG organism code, got {organism!r}')
    if client is None:
        client = KeggClient(progress=progress)

    unique = dedupe(metabolites)
    if len(unique) < len(metabolites):
        logger.info(f'Removed {len(metabolites) - len(unique)} duplicated metabolites.')

    records = client.fetch_metabolite_records(unique)
    counts = count_metabolites_per_pathway(records)
    keep = filter_pathways(counts, threshold, organism, client, progress=progress)
    filtered = apply_manual_exclusions(keep, excluded)
    return MetaboliteSets(
        filtered_pathways = filtered,
        metabolite_set = trim_to_measured(filtered, unique),
        counts = counts,
        pathway_names = pathway_names(records),
    )
