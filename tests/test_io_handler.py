import numpy as np
import pytest

from sigmoidfit.io_handler import (
    convert_to_matrix,
    create_evaluated_vector,
    format_matrix,
    format_poly,
    format_rows,
    format_vector,
    format_vector_range,
    read_csv,
    remove_first,
    remove_last,
)


def test_read_csv_skips_header_and_parses_decimal_commas(tmp_path):
    path = tmp_path / "paths.csv"
    path.write_text("t;x1;x2\n0;1,5;2\n1;3,25;4\n", encoding="utf-8")
    assert read_csv(path) == [[0.0, 1.5, 2.0], [1.0, 3.25, 4.0]]


def test_read_csv_ignores_trailing_separator_and_crlf(tmp_path):
    path = tmp_path / "paths.csv"
    path.write_bytes(b"a;b;\r\n2,5;7;\r\n")
    assert read_csv(path) == [[2.5, 7.0]]


def test_read_csv_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_csv(tmp_path / "absent.csv")


def test_read_csv_bad_value_raises(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("h\n1;abc\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_csv(path)


def test_create_evaluated_vector():
    vec = create_evaluated_vector(3, 2.5)
    assert vec.tolist() == [0.0, 2.5, 2.5, 2.5]


def test_create_evaluated_vector_negative_size():
    with pytest.raises(ValueError):
        create_evaluated_vector(-1, 1.0)


def test_remove_first_and_last():
    vec = np.array([1.0, 2.0, 3.0])
    assert remove_first(vec).tolist() == [2.0, 3.0]
    assert remove_last(vec).tolist() == [1.0, 2.0]
    assert vec.tolist() == [1.0, 2.0, 3.0]


@pytest.mark.parametrize("func", [remove_first, remove_last])
def test_remove_from_empty_raises(func):
    with pytest.raises(ValueError):
        func(np.array([]))


def test_convert_to_matrix_round_trip():
    data = [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]]
    matrix = convert_to_matrix(data)
    assert matrix.shape == (3, 2)
    assert matrix.tolist() == data


@pytest.mark.parametrize("data", [[], [[1.0, 2.0], [3.0]]])
def test_convert_to_matrix_rejects_bad_input(data):
    with pytest.raises(ValueError):
        convert_to_matrix(data)


def test_format_matrix_is_aligned_and_round_trips():
    matrix = np.array([[1.5, -2.0], [10.0, 3.0]])
    text = format_matrix(matrix)
    lines = text.split("\n")
    assert len(lines) == 2
    assert len({len(line) for line in lines}) == 1
    parsed = [[float(tok) for tok in line.split()] for line in lines]
    assert parsed == matrix.tolist()


def test_format_matrix_vector_is_column():
    text = format_matrix(np.array([1.0, 2.0, 3.0]))
    assert [float(line) for line in text.split("\n")] == [1.0, 2.0, 3.0]


def test_format_vector():
    assert format_vector([1.0, 2.5]) == "[ 1, 2.5 ]"


def test_format_rows_limits_rows():
    matrix = np.arange(6.0).reshape(3, 2)
    assert len(format_rows(matrix, 2).split("\n")) == 2
    all_rows = format_rows(matrix, 10).split("\n")
    assert [[float(t) for t in row.split()] for row in all_rows] == matrix.tolist()


def test_format_vector_range():
    data = [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]
    assert format_vector_range(data, 1, 2) == "1 2 "
    assert format_vector_range(data, 5, 5).split("\n")[1].split() == ["4", "5", "6"]


def test_format_poly_hides_unit_coefficients():
    assert format_poly([1.0, -2.0, 1.0]) == "f(x) = *x^2 - 2*x + 1"


def test_format_poly_linear():
    assert format_poly([-3.0, 0.5]) == "f(x) = 0.5*x - 3"