"""Shared constants and enums used across the engine."""

from enum import StrEnum


class CoreProcessType(StrEnum):
    """Kind tag recorded on engines and on error stack frames."""

    PROCESS_ENGINE = "PROCESS_ENGINE"
    PIPELINE = "PIPELINE"


class BeltHook(StrEnum):
    """Hook names a belt plugin may implement, one per belt."""

    INPUT = "process_input"
    OUTPUT = "process_output"
    ERROR = "process_error"
