"""Console entry points for the budget planner."""
