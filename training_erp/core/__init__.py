"""Domain core: exceptions, time zone helpers and planning rules."""
