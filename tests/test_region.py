"""
CompiledRegion tests.
"""

import dataclasses

import pytest

from sfzutils.constants import DiscreteValue
from sfzutils.region import CompiledRegion


def test_defaults():
    region = CompiledRegion()
    assert region.lokey == -1
    assert region.hikey == -1
    assert region.onlykey == -1
    assert region.keycenter == -1
    assert region.lovel == 0
    assert region.hivel == 127
    assert region.amp_veltrack == 100
    assert region.trigger == DiscreteValue.ATTACK


def test_from_text(make_region):
    region = make_region(
        "<region>sample=a b.wav lokey=c4 hikey=72 pitch_keycenter=62 "
        "lovel=10 hivel=100 ampeg_release=.25 amp_veltrack=50 "
        "lorand=.2 hirand=.4 seq_position=2 loop_mode=loop_continuous"
    )
    assert region.sample_file == "a b.wav"
    assert (region.lokey, region.hikey, region.keycenter) == (60, 72, 62)
    assert (region.lovel, region.hivel) == (10, 100)
    assert region.ampeg_release == pytest.approx(.25)
    assert region.amp_veltrack == pytest.approx(50)
    assert (region.lorand, region.hirand) == (pytest.approx(.2), pytest.approx(.4))
    assert region.seq_position == 2
    assert region.loop_mode == DiscreteValue.LOOP_CONTINUOUS
    assert region.has_random_range
    assert region.has_seq_position


def test_region_is_immutable(make_region):
    region = make_region("<region>sample=a.wav")
    with pytest.raises(dataclasses.FrozenInstanceError):
        region.lokey = 3


def test_unknown_opcode_keeps_region(make_region, err):
    region = make_region("<region>sample=a.wav foo_bar=1 lokey=3")
    assert region.lokey == 3
    assert err.unrecognized_opcodes == {"foo_bar"}


def test_onlykey_region_matches_only_its_key(make_region):
    region = make_region("<region>sample=kick.wav key=36")
    assert region.lokey == -1 and region.hikey == -1
    assert region.matches(36, 100)
    assert not region.matches(37, 100)
    assert region.effective_keycenter() == 36


def test_unset_key_range_matches_everything():
    region = CompiledRegion(sample_file="a.wav")
    assert region.matches(0, 1)
    assert region.matches(127, 127)
    assert region.effective_keycenter() is None


def test_key_and_velocity_bounds():
    region = CompiledRegion(sample_file="a.wav", lokey=60, hikey=64, lovel=20, hivel=90)
    assert region.matches(60, 20)
    assert region.matches(64, 90)
    assert not region.matches(59, 50)
    assert not region.matches(65, 50)
    assert not region.matches(62, 19)
    assert not region.matches(62, 91)


def test_half_open_key_range():
    region = CompiledRegion(sample_file="a.wav", lokey=60)
    assert region.matches_pitch(127)
    assert not region.matches_pitch(59)


@pytest.mark.parametrize("kwargs", [
    {"lokey": 64, "hikey": 60},
    {"lovel": 100, "hivel": 20},
    {"hivel": 128},
    {"lokey": -2},
    {"keycenter": 200},
])
def test_invalid_bounds(kwargs):
    with pytest.raises(ValueError):
        CompiledRegion(**kwargs)


def test_default_path_prefixes_sample(make_region):
    region = make_region("<control>default_path=samples/<region>sample=a.wav")
    assert region.sample_file == "samples/a.wav"
