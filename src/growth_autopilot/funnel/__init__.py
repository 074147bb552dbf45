"""Conversion funnel metrics from exported event logs."""
