"""REST adapter over the workflow studio engine."""
