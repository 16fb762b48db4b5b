import numpy as np
import pytest
from numpy.testing import assert_allclose

from surface_interp.targets import target_mask, target_output


def test_mask_defaults_to_all_true():
    assert target_mask(None, 3).tolist() == [True, True, True]


def test_mask_is_flattened_and_cast():
    assert target_mask(np.array([[1], [0]]), 2).tolist() == [True, False]


def test_mask_length_mismatch():
    with pytest.raises(ValueError, match="markers length"):
        target_mask([True], 2)


def test_output_new_vector():
    out = target_output(None, 4)
    assert out.dtype == float
    assert_allclose(out, np.zeros(4))


def test_output_reuses_and_zeroes_buffer():
    buf = np.arange(3, dtype=float)
    assert target_output(buf, 3) is buf
    assert_allclose(buf, 0.0)


def test_output_shape_mismatch():
    with pytest.raises(ValueError, match="target_values shape"):
        target_output(np.zeros((3, 1)), 3)
