"""Core types and calibration constants."""
