"""Test RepresentationDecoder templates and degraded mode."""

import pytest

from rala.grib.representation import RepresentationDecoder
from rala.grib.types import DegradedPacking, ImagePacking, SimplePacking
from tests.helpers.fake_grib import representation_section

pytestmark = pytest.mark.unit


def test_simple_packing_fields():
    payload = representation_section(reference=-3.5, binary_scale=-2, decimal_scale=1, bits=16)

    outcome = RepresentationDecoder().decode(payload)

    assert not outcome.defaulted
    packing = outcome.value
    assert isinstance(packing, SimplePacking)
    assert packing.reference_value == -3.5
    assert packing.binary_scale == -2
    assert packing.decimal_scale == 1
    assert packing.bits_per_value == 16
    assert packing.kind == "simple"


def test_image_packing_template_41():
    payload = representation_section(reference=0.0, decimal_scale=1, bits=16, template=41)

    packing = RepresentationDecoder().decode(payload).value

    assert isinstance(packing, ImagePacking)
    assert packing.template == 41
    assert packing.decimal_scale == 1


def test_unknown_template_is_degraded():
    payload = representation_section(template=3)

    outcome = RepresentationDecoder().decode(payload)

    assert outcome.defaulted
    assert isinstance(outcome.value, DegradedPacking)
    assert outcome.value.template == 3
    assert outcome.value.bits_per_value == 16


def test_absent_section_is_degraded():
    outcome = RepresentationDecoder().decode(None)

    assert outcome.defaulted
    assert outcome.value.template is None


def test_truncated_fields_are_degraded():
    outcome = RepresentationDecoder().decode(representation_section()[:15])

    assert outcome.defaulted
    assert outcome.value.template == 0
