# forward imports
from .bundle import BundleImporter, load_bundle  # noqa: F401
from .result import BundleResult, ParseResult  # noqa: F401
from .small_works import (  # noqa: F401
    ImportRow,
    SmallWorksParser,
    parse_small_works_csv,
    row_to_estimate,
    row_to_project,
)
