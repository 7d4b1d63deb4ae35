"""Tests for metric identities, instance domain numbers and units."""

import pytest

from sysstat_pcp.metrics.identity import (
    BYTES,
    KBYTES,
    PER_SEC,
    PM_INDOM_NULL,
    Units,
    ValueType,
    format_id,
    format_indom,
    pmi_id,
    pmi_indom,
    unpack_id,
    unpack_indom,
)


def test_pmi_id_packing():
    """Domain, cluster and item land in their PCP bit ranges."""
    pmid = pmi_id(60, 0, 20)
    assert pmid == (60 << 22) | 20
    assert unpack_id(pmid) == (60, 0, 20)
    assert format_id(pmid) == "60.0.20"


def test_pmi_id_cluster_and_item():
    pmid = pmi_id(60, 4, 1)
    assert unpack_id(pmid) == (60, 4, 1)
    assert pmid == (60 << 22) | (4 << 10) | 1


def test_pmi_indom_packing():
    indom = pmi_indom(60, 40)
    assert unpack_indom(indom) == (60, 40)
    assert format_indom(indom) == "60.40"
    assert format_indom(PM_INDOM_NULL) == "PM_INDOM_NULL"


def test_value_type_codes():
    """Value type codes match the archive format."""
    assert ValueType.U32 == 1
    assert ValueType.U64 == 3
    assert ValueType.FLOAT == 4
    assert ValueType.DOUBLE == 5
    assert ValueType.STRING == 6
    assert ValueType.U64.is_integer
    assert not ValueType.FLOAT.is_integer
    assert not ValueType.STRING.is_numeric


def test_units_field_order():
    """Left-to-right order lists dimensions first, right-to-left reverses it."""
    assert KBYTES.fields(True) == (1, 0, 0, 1, 0, 0, 0)
    assert KBYTES.fields(False) == (0, 0, 0, 1, 0, 0, 1)


@pytest.mark.parametrize("ltor", [True, False])
def test_units_from_fields_inverts_fields(ltor):
    assert Units.from_fields(PER_SEC.fields(ltor), ltor) == PER_SEC


def test_units_from_fields_rejects_wrong_length():
    with pytest.raises(ValueError):
        Units.from_fields([0, 0, 0], True)


def test_units_word_and_label():
    assert BYTES.word() == 1 << 28
    assert KBYTES.label() == "Kbyte"
    assert PER_SEC.label() == "count / sec"
    assert Units().label() == ""
