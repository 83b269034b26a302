# WORKFLOW: Registry of the CT cannabis datasets.
# Used by: Pipeline and CLI dataset selection
# Datasets:
# 1. brands - brand registry with lab results (cleaned by the measurement pass)
# 2. credentials - license credential counts
# 3. applications - license applications
# 4. sales - weekly retail sales
# 5. tax - monthly tax revenue

"""
Registry of the CT cannabis datasets.
"""

from typing import Dict, Iterable, List

from etl.datasets import applications, brands, credentials, sales, tax
from etl.datasets.common import Dataset

DATASETS: Dict[str, Dataset] = {
    d.name: d
    for d in (
        brands.DATASET,
        credentials.DATASET,
        applications.DATASET,
        sales.DATASET,
        tax.DATASET,
    )
}


def select_datasets(names: Iterable[str]) -> List[Dataset]:
    """
    Resolve dataset names (case-insensitive) in registry order.

    Raises:
        ValueError: If a name is not a known dataset
    """
    wanted = {n.strip().lower() for n in names if n.strip()}
    unknown = wanted - set(DATASETS)
    if unknown:
        raise ValueError(
            f"Unknown datasets: {', '.join(sorted(unknown))} "
            f"(available: {', '.join(DATASETS)})"
        )
    return [d for name, d in DATASETS.items() if name in wanted]
