"""
Pytest fixtures for sfzutils tests.
"""
import pytest

from sfzutils.instrument import compile_regions
from sfzutils.schema import SamplerErrorContext


@pytest.fixture
def err():
    """A fresh diagnostics context."""
    return SamplerErrorContext()


@pytest.fixture
def make_region(err):
    """Compiles SFZ text holding exactly one region."""
    def _make(text):
        regions = compile_regions(text, err)
        assert len(regions) == 1
        return regions[0]
    return _make


@pytest.fixture
def piano_sfz():
    """Two key-split regions plus a velocity-layered top octave."""
    return """
// test piano
<control>default_path=samples/
<group>amp_veltrack=100 ampeg_release=.3
<region>sample=piano c3.wav lokey=c3 hikey=b3 pitch_keycenter=c3
<region>sample=piano c4.wav lokey=c4 hikey=b4 pitch_keycenter=c4
<group>lokey=c5 hikey=c6 pitch_keycenter=c5
<region>sample=soft c5.wav lovel=1 hivel=64
<region>sample=loud c5.wav lovel=65 hivel=127
"""
