"""Flask JSON API over the budget planner core."""
