import re
from contextlib import nullcontext as does_not_raise

import numpy as np
import pytest
from pyadjadj.utils import as_column_matrix, object_or_object_sequence_to_list


@pytest.mark.parametrize(
    "arr, expected_shape, expected_exception",
    [
        (np.ones(5), (5, 1), does_not_raise()),
        ([1.0, 2.0], (2, 1), does_not_raise()),
        (np.ones((4, 3)), (4, 3), does_not_raise()),
        (
            np.ones((2, 2, 2)),
            None,
            pytest.raises(
                ValueError,
                match=re.escape(
                    "Expected a 1D vector or a 2D matrix, got an array with 3 dims!"
                ),
            ),
        ),
    ],
)
def test_as_column_matrix(arr, expected_shape, expected_exception) -> None:
    with expected_exception:
        out = as_column_matrix(arr)
        assert out.shape == expected_shape
        assert out.dtype == np.float64


def test_object_or_object_sequence_to_list() -> None:
    assert object_or_object_sequence_to_list(1.0) == [1.0]
    assert object_or_object_sequence_to_list([1.0, 2.0]) == [1.0, 2.0]
    assert object_or_object_sequence_to_list((3,)) == [3]
