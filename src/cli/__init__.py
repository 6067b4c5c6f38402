"""Interactive session over the trading engine."""
