import numpy as np
import pytest

from tisc.config import ConfigurationError, PhysicalParameters
from tisc.scf.eigensolver import EigenSolver, EigenSolverError, ScipyEigenSolver
from tisc.scf.loop import LoopStatus, SelfConsistencyLoop
from tisc.scf.order_parameter import WARMUP_ITERATIONS


class CountingSolver(EigenSolver):
    def __init__(self):
        self.calls = 0
        self.inner = ScipyEigenSolver()

    def solve(self, matrix):
        self.calls += 1
        return self.inner.solve(matrix)


class BrokenSolver(EigenSolver):
    def solve(self, matrix):
        raise EigenSolverError("no convergence")


def bcs_parameters():
    # single s-wave layer at (pi/2, pi/2): xi = -mu, fixed point |D| = sqrt(U^2/4 - xi^2)
    return PhysicalParameters(material="swave", layer_count=1, sc_layer_count=1, mu_sc=0.5,
                              interaction_sc=-2.0, temperature=1.0, initial_gap=0.1)


def test_non_interacting_converges_right_after_warmup():
    p = PhysicalParameters(layer_count=4, sc_layer_count=2, interaction_sc=0.0, interaction_ti=0.0,
                           initial_gap=0.0)
    solver = CountingSolver()
    result = SelfConsistencyLoop(p, solver=solver, tolerance=1e-8).run((0.1, 0.2))
    assert result.status is LoopStatus.CONVERGED
    assert result.iterations == WARMUP_ITERATIONS + 1
    assert solver.calls == WARMUP_ITERATIONS + 1
    assert result.metric.max_abs_delta == 0.0
    assert np.allclose(result.state.amplitudes, 0)


def test_cap_below_warmup_is_exhausted():
    result = SelfConsistencyLoop(bcs_parameters(), max_iterations=5).run((np.pi / 2, np.pi / 2))
    assert result.status is LoopStatus.EXHAUSTED
    assert result.iterations == 5
    assert result.metric is None
    assert all(r.max_abs_delta is None for r in result.history)


def test_iteration_bound():
    p = PhysicalParameters(layer_count=4, sc_layer_count=2)
    solver = CountingSolver()
    result = SelfConsistencyLoop(p, solver=solver, tolerance=1e-14, max_iterations=15).run((0.4, 0.3))
    assert result.iterations <= 15
    assert solver.calls == result.iterations == len(result.history)
    assert result.status in (LoopStatus.CONVERGED, LoopStatus.EXHAUSTED)


def test_bcs_fixed_point():
    loop = SelfConsistencyLoop(bcs_parameters(), tolerance=1e-11, max_iterations=300)
    k = (np.pi / 2, np.pi / 2)
    result = loop.run(k)
    assert result.converged
    gap = np.sqrt(0.75)
    assert result.state.channel("A")[0] == pytest.approx(gap, abs=1e-8)
    assert result.state.channel("B")[0] == pytest.approx(gap, abs=1e-8)
    assert np.allclose(np.delete(result.state.amplitudes[0], [0, 4]), 0, atol=1e-10)

    # restarting from the fixed point stops as soon as the metric is measured
    again = loop.run(k, initial_state=result.state)
    assert again.converged
    assert again.iterations == WARMUP_ITERATIONS + 1
    assert np.allclose(again.state.amplitudes, result.state.amplitudes, atol=1e-9)


def test_solver_failure_propagates():
    loop = SelfConsistencyLoop(bcs_parameters(), solver=BrokenSolver())
    with pytest.raises(EigenSolverError):
        loop.run((0.0, 0.0))


@pytest.mark.parametrize("options,overrides", [
    ({"max_iterations": 0}, {}),
    ({"tolerance": 0.0}, {}),
    ({"tolerance": -1e-8}, {}),
    ({}, {"max_iterations": -1}),
    ({}, {"tolerance": 0.0}),
])
def test_bad_cap_or_tolerance_rejected_before_solving(options, overrides):
    solver = CountingSolver()
    loop = SelfConsistencyLoop(bcs_parameters(), solver=solver, **options)
    with pytest.raises(ConfigurationError):
        loop.run((0.1, 0.1), **overrides)
    assert solver.calls == 0


def test_single_iteration_cap():
    solver = CountingSolver()
    result = SelfConsistencyLoop(bcs_parameters(), solver=solver, max_iterations=1).run((0.1, 0.1))
    assert result.status is LoopStatus.EXHAUSTED
    assert result.iterations == solver.calls == 1
