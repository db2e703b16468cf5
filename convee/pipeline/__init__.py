"""
Execution engine — process engines, pipelines and belt plugins.

A ProcessEngine wraps one core transform with input, output and error belts.
A Pipeline is a ProcessEngine whose core runs an ordered list of steps, all
sharing one MetadataHelper per run.
"""

from convee.pipeline.connectors import store_metadata, store_output
from convee.pipeline.context import EngineFrame, MetadataHelper
from convee.pipeline.engine import ProcessEngine
from convee.pipeline.errors import (
    ChainTypeError,
    ConveeConfigurationError,
    ConveeError,
    EmptyPipelineError,
    EngineDefinitionError,
    PluginDefinitionError,
    TargetNotFoundError,
    UnknownStepError,
)
from convee.pipeline.pipeline import Pipeline
from convee.pipeline.plugin import BeltPlugin, Plugin

__all__ = [
    "BeltPlugin",
    "ChainTypeError",
    "ConveeConfigurationError",
    "ConveeError",
    "EmptyPipelineError",
    "EngineDefinitionError",
    "EngineFrame",
    "MetadataHelper",
    "Pipeline",
    "Plugin",
    "PluginDefinitionError",
    "ProcessEngine",
    "TargetNotFoundError",
    "UnknownStepError",
    "store_metadata",
    "store_output",
]
