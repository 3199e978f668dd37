from .solver import Solution, LinearSolver, Solver
