from .greedy import GreedyReducer, GreedyResult, minimal_input
