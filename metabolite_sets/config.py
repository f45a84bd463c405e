from pathlib import Path
from typing import FrozenSet, Union

import yaml

KEGG_BASE_URL = 'https://rest.kegg.jp'

# KEGG rejects "get" requests with more than 10 entries.
KEGG_BATCH_LIMIT = 10

DEFAULT_THRESHOLD = 5
DEFAULT_ORGANISM = 'hsa'

# Namespace of organism-independent reference pathways, e.g. map00260.
GENERIC_PREFIX = 'map'

# Seconds, (connect, read).
REQUEST_TIMEOUT = (10, 60)
MAX_RETRIES = 3
RETRY_BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = (429, 500, 502, 503, 504)

# Pathways that pass the threshold but carry no signal for metabolomics data:
#   04974 protein digestion and absorption
#   04978 mineral absorption
#   02010 ABC transporters
#   00970 aminoacyl-tRNA biosynthesis
EXCLUDED_PATHWAYS: FrozenSet[str] = frozenset({
    'hsa04974', 'hsa04978', 'hsa02010', 'hsa00970',
    'mmu04974', 'mmu04978', 'mmu02010', 'mmu00970',
})


def load_exclusions(path: Union[str, Path]) -> FrozenSet[str]:
    """Read an exclusion list from YAML.

    Accepts either a plain list of pathway codes or a mapping with the list
    under ``exclude``.
    """
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get('exclude')
    if data is None:
        return frozenset()
    if not isinstance(data, list) or not all(isinstance(c, str) for c in data):
        raise ValueError(f'Exclusion file {path} must contain a list of pathway codes')
    return frozenset(c.strip() for c in data)
