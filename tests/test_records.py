from dataclasses import FrozenInstanceError

import pytest

from records import ParseError, Record


def test_encode_uses_two_decimal_score() -> None:
    assert Record(id=1, name="Alice", score=88.5).encode() == "1,Alice,88.50"
    assert Record(id=2, name="Bob", score=72).encode() == "2,Bob,72.00"
    assert Record(id=3, name="Carol", score=91.256).encode() == "3,Carol,91.26"


def test_describe_matches_display_format() -> None:
    record = Record(id=7, name="Dana", score=64.0)
    assert record.describe() == "Record{id=7, name='Dana', score=64.00}"


def test_record_is_immutable() -> None:
    record = Record(id=1, name="Alice", score=88.5)
    with pytest.raises(FrozenInstanceError):
        record.name = "Mallory"  # type: ignore[misc]


def test_decode_well_formed_line() -> None:
    decoded = Record.decode("1,Alice,88.50")
    assert decoded == Record(id=1, name="Alice", score=88.5)


def test_decode_trims_fields() -> None:
    decoded = Record.decode("  3 ,  Carol Ann , 91.25 \n")
    assert decoded == Record(id=3, name="Carol Ann", score=91.25)


def test_decode_accepts_plus_sign_and_integer_score() -> None:
    decoded = Record.decode("+4,Eve,90")
    assert decoded == Record(id=4, name="Eve", score=90.0)


@pytest.mark.parametrize(
    "line",
    [
        "2,Bob",
        "1,Smith, J,50.00",
        "",
        "abc,Bob,50.00",
        "1.5,Bob,50.00",
        "0,Bob,50.00",
        "-3,Bob,50.00",
        "1_000,Bob,50.00",
        "1,Bob,fifty",
        "1,Bob,nan",
        "1,Bob,inf",
        "1,Bob,1e999",
    ],
)
def test_decode_reports_parse_error(line: str) -> None:
    decoded = Record.decode(line)
    assert isinstance(decoded, ParseError)
    assert decoded.line == line
    assert decoded.reason


def test_decode_does_not_validate_field_ranges() -> None:
    decoded = Record.decode("5,X,150.00")
    assert isinstance(decoded, Record)
    assert decoded.validate() is not None


def test_validate_accepts_boundaries() -> None:
    assert Record(id=1, name="Low", score=0.0).validate() is None
    assert Record(id=2, name="High", score=100.0).validate() is None
    assert Record(id=3, name="Int", score=55).validate() is None


@pytest.mark.parametrize(
    ("record", "message"),
    [
        (Record(id=0, name="X", score=50.0), "ID must be a positive integer"),
        (Record(id=-1, name="X", score=50.0), "ID must be a positive integer"),
        (Record(id=True, name="X", score=50.0), "ID must be a positive integer"),
        (Record(id=5, name="", score=50.0), "Name cannot be empty"),
        (Record(id=5, name="   ", score=50.0), "Name cannot be empty"),
        (Record(id=5, name="X", score=150.0), "Score must be between 0 and 100"),
        (Record(id=5, name="X", score=-0.01), "Score must be between 0 and 100"),
        (Record(id=5, name="X", score=float("nan")), "Score must be between 0 and 100"),
    ],
)
def test_validate_reports_first_violation(record: Record, message: str) -> None:
    assert record.validate() == message


def test_normalized_trims_name_and_coerces_score() -> None:
    normalized = Record(id=1, name="  Alice ", score=88).normalized()
    assert normalized == Record(id=1, name="Alice", score=88.0)
    assert isinstance(normalized.score, float)


def test_lossy_names_are_detected() -> None:
    assert Record(id=1, name="Smith, J", score=1.0).has_lossy_name()
    assert Record(id=1, name="two\nlines", score=1.0).has_lossy_name()
    assert not Record(id=1, name="Smith J", score=1.0).has_lossy_name()
