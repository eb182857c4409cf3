"""
Schema tests - opcode lookup, value conversion and diagnostics.
"""

import pytest

from sfzutils.constants import OPCODE_NAMES, OPCODES, OPCODE_TYPES, DiscreteValue, Opcode, OpcodeType
from sfzutils.schema import (
    SamplerErrorContext,
    compile_key_values,
    convert_to_float,
    convert_to_int,
    key_text_to_type,
    translate,
    translate_discrete,
)


@pytest.mark.parametrize("text, expected", [
    ("c4", 60),
    ("c#4", 61),
    ("a0", 21),
    ("b3", 59),
    ("c-1", 0),
    ("g9", 127),
    ("60", 60),
    ("-12", -12),
    ("0", 0),
])
def test_convert_to_int(text, expected):
    assert convert_to_int(text) == expected


@pytest.mark.parametrize("text", ["", "x1", "12abc", "b", "c#", "h4", "1.5"])
def test_convert_to_int_failures(text):
    assert convert_to_int(text) is None


def test_convert_to_float():
    assert convert_to_float(".2") == pytest.approx(0.2)
    assert convert_to_float("-3") == -3.0
    assert convert_to_float("loud") is None
    assert convert_to_float("+1.5e2") == pytest.approx(150.0)
    assert convert_to_float("3.") == 3.0


@pytest.mark.parametrize("text", ["", "nan", "NaN", "inf", "-inf", "infinity", "1_0", "1e999", " 1", "1.2.3", "e5"])
def test_convert_to_float_failures(text):
    assert convert_to_float(text) is None


def test_non_finite_floats_are_dropped():
    err = SamplerErrorContext()
    values = compile_key_values(err, [("amp_veltrack", "nan"), ("ampeg_release", "inf"), ("hikey", "64")])
    assert Opcode.AMP_VELTRACK not in values
    assert Opcode.AMPEG_RELEASE not in values
    assert err.bad_values == {"amp_veltrack=nan", "ampeg_release=inf"}


def test_every_opcode_has_a_type_and_one_name():
    assert set(OPCODE_TYPES) == set(OPCODES.values())
    assert len(OPCODE_NAMES) == len(OPCODES)
    assert Opcode.NONE not in OPCODE_TYPES


def test_translate():
    assert translate("lokey") == Opcode.LO_KEY
    assert translate("pitch_keycenter") == Opcode.PITCH_KEYCENTER
    assert translate("nope") == Opcode.NONE


def test_translate_discrete():
    assert translate_discrete("loop_continuous") == DiscreteValue.LOOP_CONTINUOUS
    assert translate_discrete("one_shot") == DiscreteValue.ONE_SHOT
    assert translate_discrete("sometimes") == DiscreteValue.NONE


def test_key_text_to_type():
    assert key_text_to_type("sample") == OpcodeType.STRING
    assert key_text_to_type("hikey") == OpcodeType.INT
    assert key_text_to_type("amp_veltrack") == OpcodeType.FLOAT
    assert key_text_to_type("trigger") == OpcodeType.DISCRETE
    assert key_text_to_type("a.wav") == OpcodeType.UNKNOWN


def test_lookup_without_context_records_nothing():
    err = SamplerErrorContext()
    key_text_to_type("mystery")
    assert not err.has_errors()


def test_compile_typed_values():
    err = SamplerErrorContext()
    values = compile_key_values(err, [
        ("lokey", "c4"),
        ("hikey", "72"),
        ("sample", "piano c4.wav"),
        ("ampeg_release", ".5"),
        ("loop_mode", "one_shot"),
    ])
    assert len(values) == 5
    assert values.get(Opcode.LO_KEY).value == 60
    assert values.get(Opcode.LO_KEY).type == OpcodeType.INT
    assert values.get(Opcode.HI_KEY).value == 72
    assert values.get(Opcode.SAMPLE).value == "piano c4.wav"
    assert values.get(Opcode.AMPEG_RELEASE).value == pytest.approx(0.5)
    assert values.get(Opcode.LOOP_MODE).value == DiscreteValue.ONE_SHOT
    assert not err.has_errors()


def test_unrecognized_opcode_does_not_stop_compilation():
    err = SamplerErrorContext()
    values = compile_key_values(err, [("foo_bar", "1"), ("lokey", "10")])
    assert Opcode.LO_KEY in values
    assert len(values) == 1
    assert err.unrecognized_opcodes == {"foo_bar"}


def test_unrecognized_opcode_reported_once_across_regions():
    err = SamplerErrorContext()
    compile_key_values(err, [("foo_bar", "1"), ("foo_bar", "2")])
    compile_key_values(err, [("foo_bar", "3"), ("hikey", "5")])
    assert err.unrecognized_opcodes == {"foo_bar"}
    assert err.messages() == ["unrecognized opcode: foo_bar"]


def test_separate_contexts_do_not_share_state():
    first = SamplerErrorContext()
    second = SamplerErrorContext()
    compile_key_values(first, [("foo_bar", "1")])
    compile_key_values(second, [("lokey", "1")])
    assert second.unrecognized_opcodes == set()


def test_bad_values_are_dropped():
    err = SamplerErrorContext()
    values = compile_key_values(err, [("lokey", "low"), ("amp_veltrack", "lots"), ("hikey", "64")])
    assert Opcode.LO_KEY not in values
    assert Opcode.AMP_VELTRACK not in values
    assert values.get(Opcode.HI_KEY).value == 64
    assert err.bad_values == {"lokey=low", "amp_veltrack=lots"}


def test_unknown_discrete_value_is_kept_as_none():
    err = SamplerErrorContext()
    values = compile_key_values(err, [("trigger", "sometimes")])
    assert values.get(Opcode.TRIGGER).value == DiscreteValue.NONE
    assert not err.has_errors()


def test_later_pair_wins():
    err = SamplerErrorContext()
    values = compile_key_values(err, [("lokey", "10"), ("lokey", "20")])
    assert values.get(Opcode.LO_KEY).value == 20
