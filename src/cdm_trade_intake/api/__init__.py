"""HTTP service surface for the CDM Trade Intake System."""
