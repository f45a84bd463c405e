import logging
from pathlib import Path
from typing import List

import pandas as pd
import typer
import yaml
from tqdm import tqdm

from metabolite_sets.config import DEFAULT_ORGANISM, DEFAULT_THRESHOLD, EXCLUDED_PATHWAYS, load_exclusions
from metabolite_sets.errors import MetaboliteSetError
from metabolite_sets.kegg import KeggClient
from metabolite_sets.model import MetaboliteSets, strip_organism_prefix
from metabolite_sets.pipeline import build_metabolite_sets, summarize_counts, trim_to_measured_named

def read_metabolites(dataset: Path) -> List[str]:
    """KEGG codes from the row labels of a dataset CSV (metabolites as rows, samples as columns)."""
    df = pd.read_csv(dataset, index_col=0)
    return [str(m).strip() for m in df.index if not pd.isna(m)]

def to_output(result: MetaboliteSets, metabolites: List[str]) -> dict:
    named = trim_to_measured_named(result.filtered_pathways, metabolites)
    output = {}
    for p in result.filtered_pathways:
        output[p.entry] = {
            'pathname': p.pathname,
            'pathway_id': strip_organism_prefix(p.entry),
            'total_compounds': len(p.compounds),
            'compounds': {c: name for c, name in named[p.entry]},
        }
    return output

def main(
    dataset: Path = typer.Argument(..., exists=True, dir_okay=False, help='CSV with KEGG compound codes as row labels.'),
    threshold: int = typer.Option(DEFAULT_THRESHOLD, min=1, help='Minimum number of measured metabolites per pathway.'),
    organism: str = typer.Option(DEFAULT_ORGANISM, help='KEGG organism code, e.g. hsa or mmu.'),
    exclusions: Path = typer.Option(None, exists=True, dir_okay=False, help='YAML list of pathway codes to exclude instead of the defaults.'),
    output: Path = typer.Option(None, help='Write metabolite sets to this YAML file.'),
    verbose: bool = typer.Option(False, '--verbose', '-v'),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S',
    )
    try:
        metabolites = read_metabolites(dataset)
        print(f'Dataset: {len(metabolites)} metabolites.')
        excluded = load_exclusions(exclusions) if exclusions else EXCLUDED_PATHWAYS
        result = build_metabolite_sets(
            metabolites,
            threshold=threshold,
            organism=organism,
            client=KeggClient(progress=True),
            excluded=excluded,
            progress=True,
        )
    except (MetaboliteSetError, pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        typer.echo(f'Error: {e}', err=True)
        raise typer.Exit(code=1)

    print(summarize_counts(result.counts, names=result.pathway_names))
    print()
    for p in result.filtered_pathways:
        tqdm.write(f'  {p.entry} {p.pathname}: {len(result.metabolite_set[p.entry])}/{len(p.compounds)}')
    print(f'Result: {len(result.filtered_pathways)} metabolite sets.')

    if output:
        with open(output, 'w+') as f:
            yaml.dump(to_output(result, metabolites), f, sort_keys=False, allow_unicode=True)
        print(f'Saved: {output}')

def run():
    typer.run(main)

if __name__ == '__main__':
    run()
