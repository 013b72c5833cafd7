from typing import List


class Callback:
    """
    Implement callbacks for gmres or other solvers.

    With ``callback_type="pr_norm"`` gmres calls the instance once per inner
    iteration with the preconditioned residual norm, so that `itercount` is the
    number of matrix-vector products performed.
    """

    def __init__(self) -> None:
        self.comptor: int = 0
        self.residuals: List[float] = []

    def __call__(self, *args, **kwargs) -> None:
        self.comptor += 1
        if len(args) != 0 and isinstance(args[0], float):
            self.residuals.append(args[0])

    def itercount(self) -> int:
        return self.comptor

    def clear(self) -> None:
        self.comptor = 0
        self.residuals = []
