from pyadjadj.forward import LinearSolverType
from pyadjadj.utils import StrEnum


class Color(StrEnum):
    RED = "red"
    BLUE = "blue"


def test_str_enum() -> None:
    assert str(Color.RED) == "red"
    assert Color("blue") is Color.BLUE
    assert Color.RED == "red"
    assert Color.to_list() == ["red", "blue"]
    assert LinearSolverType.DIRECT in LinearSolverType.to_list()
