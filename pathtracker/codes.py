"""
Result codes for PathTracker.

Every tracking step, and every full path trace, reports its outcome with a
SuccessCode. Expected numerical trouble is never raised as an exception.
"""

from enum import Enum


class SuccessCode(Enum):
    """Outcome of a predictor, corrector, tracker iteration or path trace."""
    SUCCESS = 0
    MATRIX_SOLVE_FAILURE = 1
    MATRIX_SOLVE_FAILURE_FIRST_PART_OF_PREDICTION = 2
    FAILED_TO_CONVERGE = 3
    GOING_TO_INFINITY = 4
    MAX_NUM_STEPS_TAKEN = 5
    MIN_STEP_SIZE_REACHED = 6
    CANCELLED = 7

    @property
    def is_success(self) -> bool:
        return self is SuccessCode.SUCCESS

    @property
    def is_terminal(self) -> bool:
        """Whether this code ends the path instead of triggering a retry."""
        return self in _TERMINAL_CODES

    @property
    def is_matrix_solve_failure(self) -> bool:
        return self in (SuccessCode.MATRIX_SOLVE_FAILURE,
                        SuccessCode.MATRIX_SOLVE_FAILURE_FIRST_PART_OF_PREDICTION)


_TERMINAL_CODES = frozenset({
    SuccessCode.GOING_TO_INFINITY,
    SuccessCode.MAX_NUM_STEPS_TAKEN,
    SuccessCode.MIN_STEP_SIZE_REACHED,
    SuccessCode.CANCELLED,
})
