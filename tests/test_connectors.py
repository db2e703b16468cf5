import asyncio

from convee import Pipeline, ProcessEngine, store_metadata, store_output


async def double(n, meta):
    return n * 2


def number_to_object(n, meta):
    return {"n": n, "tag": "custom"}


def object_to_number(obj, meta):
    return obj["n"]


async def text_plus_one(text, meta):
    return int(text) + 1


def _build(steps, captured):
    def capture(value, meta):
        captured.append(meta)
        return value

    return Pipeline.create([*steps, capture], name="TestPipeline", id="test123")


def test_store_metadata_records_each_intermediate_value():
    number_to_string = ProcessEngine.create(lambda n, meta: str(n), name="numberToStringEngine")
    captured = []
    pipeline = _build(
        [
            double,
            store_metadata("first", double),
            number_to_object,
            store_metadata("second"),
            object_to_number,
            store_metadata("third", object_to_number),
            number_to_string,
            store_output(number_to_string, "fourth"),
            text_plus_one,
            store_output(text_plus_one, "fifth"),
        ],
        captured,
    )

    assert asyncio.run(pipeline.run(10)) == 21
    assert captured[0].get_all() == {
        "first": 20,
        "second": {"n": 20, "tag": "custom"},
        "third": 20,
        "fourth": "20",
        "fifth": 21,
    }

    assert asyncio.run(pipeline.run(5)) == 11
    assert captured[1].get("first") == 10
    assert captured[1].get("fourth") == "10"
    assert captured[0].get("first") == 20


def test_connectors_pass_values_through_unchanged():
    step = store_metadata("key")
    sentinel = object()

    class Meta:
        def __init__(self):
            self.data = {}

        def add(self, key, value):
            self.data[key] = value

    meta = Meta()
    assert step(sentinel, meta) is sentinel
    assert meta.data == {"key": sentinel}


def test_connector_names_are_descriptive():
    assert store_metadata("a").__name__ == "store_metadata[a]"
    assert store_output(double, "b").__name__ == "store_output[b]"
