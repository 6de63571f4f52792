"""Qt integration for the enhancement pipeline."""
