"""
Shared fixtures: small pricing engines and plugins used across the suite.

Engines record a line in the run's metadata so tests can check what each
step saw.
"""

from __future__ import annotations

import pytest

from convee import MetadataHelper, Plugin, ProcessEngine
from convee.core.config import settings


def make_apply_discount(discount: float, name: str = "ApplyDiscountProcessor") -> ProcessEngine:
    async def apply_discount(price: float, metadata: MetadataHelper) -> float:
        metadata.add(name, f"Applying discount of {discount * 100}% to price: {price}")
        return price - price * discount

    return ProcessEngine.create(apply_discount, name=name)


def make_add_tax(tax: float, name: str = "AddTaxProcessor") -> ProcessEngine:
    async def add_tax(price: float, metadata: MetadataHelper) -> float:
        metadata.add(name, f"Adding tax of {tax * 100}% to price: {price}")
        return price + price * tax

    return ProcessEngine.create(add_tax, name=name)


class SumProcessor(ProcessEngine):
    name = "SumProcessor"

    async def process(self, item: dict, metadata: MetadataHelper) -> int:
        metadata.add("SumProcessor", f"Summing {item['a']} and {item['b']}")
        if not isinstance(item["a"], (int, float)) or not isinstance(item["b"], (int, float)):
            raise TypeError("The inputs a and b must be numbers.")
        return item["a"] + item["b"]


@pytest.fixture
def apply_discount():
    return make_apply_discount


@pytest.fixture
def add_tax():
    return make_add_tax


@pytest.fixture
def sum_processor():
    return SumProcessor


@pytest.fixture
def halve_input():
    return Plugin.create(name="halve", process_input=lambda n, meta: n * 0.5)


@pytest.fixture
def invert_sign():
    def _invert(item: dict, metadata: MetadataHelper) -> dict:
        metadata.add("InvertSignInputPlugin", f"Inverting {item['a']} and {item['b']}")
        return {"a": -item["a"], "b": -item["b"]}

    return Plugin.create(name="InvertSignInputPlugin", process_input=_invert)


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Pin engine settings so environment variables cannot leak into tests."""
    monkeypatch.setattr(settings, "STRICT_CHAIN_TYPES", False)
    monkeypatch.setattr(settings, "STACK_INCLUDE_METADATA_KEYS", True)
    monkeypatch.setattr(settings, "DEFAULT_PROCESS_NAME", "Process")
    monkeypatch.setattr(settings, "DEFAULT_PIPELINE_NAME", "Pipeline")
