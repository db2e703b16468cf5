"""
convee — composable data-transformation steps with plugin belts.

Process engines wrap a core transform; pipelines chain them; belt plugins
add input, output and error handling around either without touching the
transform itself.
"""

from convee.core.constants import CoreProcessType
from convee.pipeline import (
    BeltPlugin,
    ConveeError,
    MetadataHelper,
    Pipeline,
    Plugin,
    ProcessEngine,
    store_metadata,
    store_output,
)

__all__ = [
    "BeltPlugin",
    "ConveeError",
    "CoreProcessType",
    "MetadataHelper",
    "Pipeline",
    "Plugin",
    "ProcessEngine",
    "store_metadata",
    "store_output",
]
