"""KEGG REST access for the metabolite set pipeline.

Only the two lookups the pipeline needs are implemented: batched compound
records and single pathway records, both via the ``get`` operation which
returns KEGG flat files.
"""
import logging
from typing import Dict, Iterator, List, Optional, Protocol, Sequence, Tuple

import requests
from requests.adapters import HTTPAdapter
from tqdm import tqdm
from urllib3.util.retry import Retry

from metabolite_sets.config import (
    KEGG_BASE_URL,
    KEGG_BATCH_LIMIT,
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_FACTOR,
    RETRY_STATUS_CODES,
)
from metabolite_sets.errors import PathwayNotFound, RemoteFetchError
from metabolite_sets.model import MetaboliteRecord, PathwayRecord, PathwayRef

logger = logging.getLogger(__name__)

# Width of the field name column in KEGG flat files.
KEY_WIDTH = 12


class KnowledgeBaseClient(Protocol):
    def fetch_metabolite_records(self, ids: Sequence[str]) -> List[MetaboliteRecord]:
        ...

    def fetch_pathway_record(self, code: str) -> Optional[PathwayRecord]:
        ...


def chunks(data, size=KEGG_BATCH_LIMIT):
    for i in range(0, len(data), size):
        yield data[i:i + size]


def iter_entries(text: str) -> Iterator[Dict[str, List[str]]]:
    """Split a KEGG flat file response into entries of ``field -> lines``.

    Entries are terminated by ``///``. Continuation lines (blank field column)
    are appended to the last seen field.
    """
    entry = {}
    key = None
    for line in text.splitlines():
        if line.startswith('///'):
            if entry:
                yield entry
            entry, key = {}, None
            continue
        if not line.strip():
            continue
        head = line[:KEY_WIDTH].strip()
        if head:
            key = head
            entry.setdefault(key, [])
        if key is None:
            continue
        value = line[KEY_WIDTH:].strip()
        if value:
            entry[key].append(value)
    if entry:
        yield entry


def get_first(entry, key, default=None):
    values = entry.get(key)
    if values:
        return values[0]
    return default


def split_pairs(values) -> Tuple[Tuple[str, str], ...]:
    """``["C00022  Pyruvate", ...]`` -> ``(("C00022", "Pyruvate"), ...)``"""
    pairs = []
    for value in values:
        code, _, name = value.partition(' ')
        pairs.append((code, name.strip()))
    return tuple(pairs)


def _entry_code(entry) -> str:
    head = get_first(entry, 'ENTRY')
    if not head:
        raise RemoteFetchError(f'Malformed KEGG record without ENTRY field: {sorted(entry)}')
    return head.split()[0]


def parse_metabolite(entry) -> MetaboliteRecord:
    name = get_first(entry, 'NAME')
    return MetaboliteRecord(
        entry = _entry_code(entry),
        name = name.rstrip(';') if name else None,
        pathways = tuple(PathwayRef(code, name) for code, name in split_pairs(entry.get('PATHWAY', []))),
    )


def parse_pathway(entry) -> PathwayRecord:
    pathmap = get_first(entry, 'PATHWAY_MAP')
    if pathmap:
        pathname = split_pairs([pathmap])[0][1]
    else:
        pathname = get_first(entry, 'NAME')
    return PathwayRecord(
        entry = _entry_code(entry),
        pathname = pathname,
        compounds = split_pairs(entry.get('COMPOUND', [])),
    )


def make_session(max_retries=MAX_RETRIES, backoff_factor=RETRY_BACKOFF_FACTOR) -> requests.Session:
    retry = Retry(
        total=max_retries, connect=max_retries, read=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset(['GET']),
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount('https://', adapter)
    session.mount('http://', adapter)
    return session


class KeggClient:
    def __init__(
        self,
        base_url: str = KEGG_BASE_URL,
        timeout=REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        backoff_factor: float = RETRY_BACKOFF_FACTOR,
        session: requests.Session = None,
        progress: bool = True,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or make_session(max_retries, backoff_factor)
        self.progress = progress

    def _get(self, entries: Sequence[str]) -> Optional[str]:
        """Flat file text for ``entries``, or None when KEGG knows none of them."""
        url = f'{self.base_url}/get/{"+".join(entries)}'
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteFetchError(f'KEGG request {url} failed: {e}') from e
        if r.status_code == 404:
            return None
        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            raise RemoteFetchError(f'KEGG request {url} failed: {e}') from e
        return r.text

    def fetch_metabolite_records(self, ids: Sequence[str]) -> List[MetaboliteRecord]:
        ids = list(ids)
        records = []
        batches = list(chunks(ids))
        for batch in tqdm(batches, desc='Fetching compounds', disable=not self.progress):
            text = self._get(batch)
            if text is None:
                logger.debug(f'No KEGG entries for {", ".join(batch)}')
                continue
            records.extend(parse_metabolite(e) for e in iter_entries(text))
        logger.info(f'Fetched {len(records)} of {len(ids)} compounds from KEGG in {len(batches)} requests.')
        return records

    def get_pathway_record(self, code: str) -> PathwayRecord:
        text = self._get([code])
        entries = list(iter_entries(text)) if text else []
        if not entries:
            raise PathwayNotFound(code)
        return parse_pathway(entries[0])

    def fetch_pathway_record(self, code: str) -> Optional[PathwayRecord]:
        try:
            return self.get_pathway_record(code)
        except PathwayNotFound:
            return None
