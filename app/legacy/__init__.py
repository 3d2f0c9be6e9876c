"""Legacy data import: DBF staging, migration into core tables, reconciliation."""
