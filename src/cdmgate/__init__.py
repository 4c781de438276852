"""cdmgate - CDM compliance gate for contact submissions.

cdmgate validates contact records and their submission metadata during pull
request CI, writes one log per validator and aggregates them into a report.
"""

__version__ = "0.1.0"
__author__ = "rpapub"
__email__ = "contact@rpapub.dev"
__description__ = "CI-time CDM compliance gate for contact records and submission metadata"

from cdmgate.config import GateConfig

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__description__",
    "GateConfig",
]
