"""Leave module — working-day calendar, balance engine and request workflow."""
