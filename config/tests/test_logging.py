import json
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal

from config.logging import JsonFormatter, SamplingFilter


def _record(msg="inventario.movimiento_registrado", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord("taller.inventory", level, __file__, 10, msg, None, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_renders_extras():
    record = _record(
        event="inventario.movimiento_registrado",
        cantidad=Decimal("2.5000"),
        cutoff=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        movimiento_id=7,
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["name"] == "taller.inventory"
    assert payload["message"] == "inventario.movimiento_registrado"
    assert payload["event"] == "inventario.movimiento_registrado"
    assert payload["cantidad"] == "2.5000"
    assert payload["cutoff"] == "2024-05-01T12:00:00+00:00"
    assert payload["movimiento_id"] == 7
    assert payload["time"].endswith("Z")
    assert "msg" not in payload and "args" not in payload


def test_json_formatter_includes_exception_text():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(msg="inventario.reserva_liberacion_fallida", level=logging.ERROR, exc_info=sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exc_info"]


def test_json_formatter_stringifies_unserializable_extras():
    record = _record(usuario=object())
    payload = json.loads(JsonFormatter().format(record))
    assert payload["usuario"].startswith("<object object")


def test_sampling_filter_keeps_allowed_events_and_other_levels():
    sampler = SamplingFilter(rate=0.0, levels=["INFO"], allow_events=["inventario.reservas_caducadas"])

    assert sampler.filter(_record(msg="inventario.reservas_caducadas")) is True
    assert sampler.filter(_record(msg="inventario.movimiento_registrado")) is False
    assert sampler.filter(_record(msg="inventario.movimiento_registrado", level=logging.WARNING)) is True


def test_sampling_filter_invalid_rate_allows_everything():
    sampler = SamplingFilter(rate="not-a-number")
    assert sampler.rate == 1.0
    assert sampler.filter(_record()) is True
