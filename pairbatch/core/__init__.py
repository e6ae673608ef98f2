"""Pure domain logic: error taxonomy, fee arithmetic, report formatting."""
