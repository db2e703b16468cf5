import pytest

from convee import ConveeError
from convee.pipeline.context import EngineFrame
from convee.pipeline.errors import (
    ConveeConfigurationError,
    TargetNotFoundError,
    UnknownStepError,
    ensure_convee_error,
    is_convee_error,
    is_error,
    wrap_error,
)


def _frame(source: str = "engine-1") -> EngineFrame:
    return EngineFrame(source=source, type="PROCESS_ENGINE", item_id="item-1")


def test_wrap_keeps_message_and_cause():
    original = ValueError("bad input")
    wrapped = wrap_error(original)

    assert isinstance(wrapped, ConveeError)
    assert wrapped.message == "bad input"
    assert str(wrapped) == "bad input"
    assert wrapped.source_error is original
    assert wrapped.__cause__ is original
    assert wrapped.engine_stack == []


def test_wrap_uses_class_name_for_empty_message():
    assert wrap_error(KeyError()).message == "KeyError"


def test_enrich_stack_appends_and_returns_self():
    error = wrap_error(RuntimeError("boom"))

    returned = error.enrich_stack(_frame("a")).enrich_stack(_frame("b"))

    assert returned is error
    assert [frame.source for frame in error.engine_stack] == ["a", "b"]


def test_ensure_convee_error_is_identity_for_envelopes():
    error = wrap_error(RuntimeError("boom"))

    assert ensure_convee_error(error) is error


def test_ensure_convee_error_inherits_stack_for_new_wrappers():
    previous = wrap_error(RuntimeError("first")).enrich_stack(_frame())

    replacement = ensure_convee_error(ValueError("second"), inherit=previous)

    assert replacement.message == "second"
    assert replacement.engine_stack == previous.engine_stack
    assert replacement.engine_stack is not previous.engine_stack


def test_capability_checks():
    assert is_error(ValueError())
    assert not is_error("ValueError")
    assert is_convee_error(wrap_error(ValueError()))
    assert not is_convee_error(ValueError())


def test_to_dict_serialises_frames():
    error = wrap_error(ValueError("bad")).enrich_stack(
        EngineFrame(source="e1", type="PIPELINE", item_id="i1", name="p", data_keys=("k",))
    )

    assert error.to_dict() == {
        "message": "bad",
        "source_error": "ValueError('bad')",
        "engine_stack": [
            {"source": "e1", "type": "PIPELINE", "item_id": "i1", "name": "p", "data_keys": ["k"]},
        ],
    }


def test_configuration_errors_carry_context():
    error = TargetNotFoundError("nope", target="x", available=["p"], engine_name="p")

    assert isinstance(error, ConveeConfigurationError)
    assert error.target == "x"
    assert error.available == ["p"]
    assert error.engine_name == "p"
    assert error.details == {}

    with pytest.raises(ConveeConfigurationError):
        raise UnknownStepError("bad step", step_index=2)
